"""MCP tool that assembles selected repository files into one prompt.

Registers 'build_prompt', which ingests the repository, applies the
selection (explicit paths, whole folders, or everything) and returns the
assembled text with its approximate token count.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from core.assembly import assemble, build_selection
from core.errors import ValidationError
from core.interfaces import RepositorySource
from core.models import PromptResult
from core.tokens import count_tokens
from sources.repository import get_repository_files
from sources.source_factory import get_configured_source


async def prepare_prompt(
    source: RepositorySource,
    *,
    repo_url: str,
    paths: Optional[List[str]] = None,
    folders: Optional[List[str]] = None,
    select_all: bool = False,
    include_path: bool = False,
    minify: bool = False,
) -> PromptResult:
    if not repo_url or not repo_url.strip():
        raise ValidationError("Missing repo_url")
    if not select_all and not paths and not folders:
        raise ValidationError("Select at least one path or folder, or set select_all")

    files = await get_repository_files(repo_url, source=source)
    selection = build_selection(files, paths=paths, folders=folders, select_all=select_all)

    text = assemble(files, selection.paths, include_path=include_path, minify=minify)
    return PromptResult(text=text, token_count=count_tokens(text), file_count=len(selection))


def register(mcp: FastMCP, *, source: Optional[RepositorySource] = None) -> None:
    src = source or get_configured_source()

    @mcp.tool(name="build_prompt")
    async def build_prompt(
        repo_url: str,
        paths: Optional[List[str]] = None,
        folders: Optional[List[str]] = None,
        select_all: bool = False,
        include_path: bool = False,
        minify: bool = False,
    ) -> Dict[str, Any]:
        """Concatenate selected repository files into one LLM-ready document.

        Params:
          - repo_url: HTTPS repository URL (required).
          - paths: files to include, in output order.
          - folders: folders whose files are appended after `paths`.
          - select_all: include every eligible file (overrides paths/folders).
          - include_path: prefix each file with a "[path:<path>]" line.
          - minify: collapse whitespace runs in each file to single spaces.

        Returns:
          {"text": str, "token_count": int, "file_count": int}
        """
        result = await prepare_prompt(
            src,
            repo_url=repo_url,
            paths=paths,
            folders=folders,
            select_all=select_all,
            include_path=include_path,
            minify=minify,
        )
        return {
            "text": result.text,
            "token_count": result.token_count,
            "file_count": result.file_count,
        }
