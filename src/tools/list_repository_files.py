"""MCP tool that ingests a repository and lists its eligible files.

Registers the 'list_repository_files' tool, which returns path/size/sha
for every eligible file plus a directory outline the user can pick
files or folders from.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from core.assembly import build_tree, render_tree
from core.errors import ValidationError
from core.interfaces import RepositorySource
from core.references import require_reference
from sources.repository import get_repository_files
from sources.source_factory import get_configured_source


def register(mcp: FastMCP, *, source: Optional[RepositorySource] = None) -> None:
    src = source or get_configured_source()

    @mcp.tool(name="list_repository_files")
    async def list_repository_files(repo_url: str) -> Dict[str, Any]:
        """List the eligible text files of a public GitHub repository.

        Params:
          - repo_url: HTTPS repository URL (e.g. https://github.com/owner/repo).

        Returns:
          {"repository": "owner/repo", "files": [{path, size, sha, kind}],
           "tree": "<indented outline, directories first>"}

        Raises:
          InvalidReferenceError for a bad URL; RateLimitedError when the
          GitHub quota is exhausted; NotFoundError / CloneFailedError when
          the repository cannot be fetched.
        """
        if not repo_url or not repo_url.strip():
            raise ValidationError("Missing repo_url")

        ref = require_reference(repo_url)
        files = await get_repository_files(repo_url, source=src)

        return {
            "repository": ref.slug,
            "files": [f.to_dict(include_content=False) for f in files],
            "tree": render_tree(build_tree(files)),
        }
