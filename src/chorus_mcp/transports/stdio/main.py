from __future__ import annotations

import asyncio
import logging

from mcp.server.fastmcp import FastMCP

from chorus_mcp.core.client import ChorusClient
from chorus_mcp.core.config import create_client_from_env, load_log_level
from chorus_mcp.core.logging import setup_logging
from chorus_mcp.core.registry import (
    register_discovered_tools,
    register_prompts,
    register_resources,
)

log = logging.getLogger("chorus_mcp.transports.stdio")


def build_app() -> tuple[FastMCP, ChorusClient]:
    client = create_client_from_env()
    app = FastMCP("chorus-mcp")
    register_discovered_tools(app, lambda: client)
    register_prompts(app)
    register_resources(app, lambda: client)
    return app, client


async def main() -> None:
    setup_logging(load_log_level())
    app, client = build_app()
    log.info("Chorus MCP server running via stdio")
    try:
        await app.run_stdio_async()
    finally:
        await client.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
