from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from core.tokens import count_tokens as _count_tokens


def register(mcp: FastMCP) -> None:
    @mcp.tool(name="count_tokens")
    async def count_tokens(text: str) -> int:
        """Approximate token count of `text` (cl100k_base); 0 if the tokenizer fails."""
        return _count_tokens(text or "")
