"""Server bootstrap for the repo-pack MCP service.

Creates the FastMCP instance, builds the configured ingestion source,
registers the tools with it and starts the MCP server (stdio transport).
"""

import logging

from mcp.server.fastmcp import FastMCP

from config import LOG_LEVEL
from sources.source_factory import get_configured_source

from tools.build_prompt import register as register_build_prompt
from tools.count_tokens import register as register_count_tokens
from tools.export_prompt import register as register_export_prompt
from tools.list_repository_files import register as register_list_repository_files

mcp = FastMCP("repo-pack-mcp")


def register_tools() -> None:
    # One source shared by every tool so they share the clone cache
    source = get_configured_source()

    register_list_repository_files(mcp, source=source)
    register_build_prompt(mcp, source=source)
    register_export_prompt(mcp, source=source)
    register_count_tokens(mcp)


register_tools()


def main() -> None:
    # stdout carries the stdio transport; logs go to stderr
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
