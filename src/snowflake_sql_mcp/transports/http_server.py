# Snowflake SQL MCP Server
# File: transports/http_server.py
# Version: v1

"""Streamable HTTP entrypoint for the Snowflake SQL MCP server.

Runs FastMCP in stateless mode: every POST to ``/mcp`` is handled on its
own, with the tenant identified only by the X-Snowflake-* headers of that
request. ``GET /health`` answers without touching Snowflake.
"""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..config import ServerConfig
from ..tools import tasks
from .stdio_server import SERVER_NAME, configure_logging

logger = logging.getLogger(__name__)


def build_server(config: ServerConfig) -> FastMCP:
    mcp = FastMCP(
        SERVER_NAME,
        host=config.host,
        port=config.port,
        stateless_http=True,
        json_response=True,
    )
    tasks.register_tools(mcp)

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "server": SERVER_NAME})

    return mcp


def main() -> None:
    """Entry point for ``snowflake-sql-mcp-http``."""
    configure_logging()
    config = ServerConfig.from_env()
    mcp = build_server(config)

    logger.info("Snowflake SQL MCP server listening on http://%s:%s/mcp", config.host, config.port)
    mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
