"""MCP tool that writes an assembled prompt to a text file.

Registers 'export_prompt', which builds the same document as
'build_prompt' and saves it as <owner>_<repo>.txt under EXPORT_OUT_DIR.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from config import EXPORT_OUT_DIR, PROJECT_ROOT
from core.assembly import export_filename
from core.errors import AccessDeniedError
from core.interfaces import RepositorySource
from core.references import require_reference
from sources.source_factory import get_configured_source
from tools.build_prompt import prepare_prompt


def _safe_out_dir() -> Path:
    # Resolve and enforce output dir is inside PROJECT_ROOT
    raw = (EXPORT_OUT_DIR or "").strip() or "exports"
    p = Path(raw)
    out_dir = p if p.is_absolute() else (PROJECT_ROOT / p)
    out_dir = out_dir.resolve()

    try:
        out_dir.relative_to(PROJECT_ROOT)
    except ValueError as e:
        raise AccessDeniedError("EXPORT_OUT_DIR must be within PROJECT_ROOT") from e

    return out_dir


def register(mcp: FastMCP, *, source: Optional[RepositorySource] = None) -> None:
    src = source or get_configured_source()

    @mcp.tool(name="export_prompt")
    async def export_prompt(
        repo_url: str,
        paths: Optional[List[str]] = None,
        folders: Optional[List[str]] = None,
        select_all: bool = False,
        include_path: bool = False,
        minify: bool = False,
    ) -> Dict[str, Any]:
        """Build a prompt (see build_prompt) and save it to <owner>_<repo>.txt.

        Returns:
          {"path": "<written file>", "token_count": int, "file_count": int}

        Raises:
          AccessDeniedError if EXPORT_OUT_DIR resolves outside PROJECT_ROOT,
          plus every error build_prompt can raise.
        """
        ref = require_reference(repo_url)
        out_dir = _safe_out_dir()

        result = await prepare_prompt(
            src,
            repo_url=repo_url,
            paths=paths,
            folders=folders,
            select_all=select_all,
            include_path=include_path,
            minify=minify,
        )

        out_dir.mkdir(parents=True, exist_ok=True)
        target = out_dir / export_filename(ref)
        target.write_text(result.text, encoding="utf-8")

        return {
            "path": str(target),
            "token_count": result.token_count,
            "file_count": result.file_count,
        }
