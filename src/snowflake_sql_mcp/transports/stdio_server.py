# Snowflake SQL MCP Server
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the Snowflake SQL MCP server.

This is the script behind the ``snowflake-sql-mcp`` console command.

It:

- configures logging on stderr (stdout carries the protocol),
- creates a FastMCP server and registers all Snowflake tools, and
- runs the built-in stdio transport.

Over stdio there are no request headers, so each call reads the tenant
credentials from the SNOWFLAKE_* environment variables.
"""

from __future__ import annotations

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP

from ..tools import tasks

SERVER_NAME = "snowflake-sql-mcp"


def configure_logging() -> None:
    level = os.getenv("SNOWFLAKE_MCP_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_server() -> FastMCP:
    mcp = FastMCP(SERVER_NAME)
    tasks.register_tools(mcp)
    return mcp


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    configure_logging()
    mcp = build_server()

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
