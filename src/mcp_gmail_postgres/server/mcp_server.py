"""
MCP Server binding using the official MCP Python SDK (low-level Server).

Binds the transport-agnostic Router to the protocol:
- tools/list returns the configured adapters' tools with JSON Schema inputSchema
- tools/call dispatches by name prefix; adapter errors become isError results
- resources/list returns the static gmail:// and postgres:// resources
- resources/read dispatches by URI scheme
- The server declares the 'tools' and 'resources' capabilities on initialization

This module also runs the stdio transport (for Claude Desktop and other
MCP clients that spawn the server as a subprocess). The HTTP/SSE transport
lives in http_server.py and reuses create_mcp_server().
"""

import asyncio
import logging
import os
import signal
from typing import Any, Dict, Iterable, List, Optional

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from ..catalog import SERVER_NAME, SERVER_VERSION
from ..config import Settings
from .router import Router

logger = logging.getLogger(__name__)


def create_mcp_server(router: Router) -> Server:
    """
    Create a protocol Server whose handlers delegate to the router.

    One Server is created per transport connection; all of them share the
    router and therefore the adapters' pool and API client.

    Args:
        router: Shared dispatch router

    Returns:
        Configured low-level MCP Server
    """
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return await router.list_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        return await router.call_tool(name, arguments)

    @server.list_resources()
    async def list_resources() -> List[types.Resource]:
        return await router.list_resources()

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        return await router.read_resource(str(uri))

    return server


async def shutdown_and_exit(router: Router, status: int = 0) -> None:
    """
    Release the backends and end the process.

    The stdio transport reads stdin in a worker thread that task
    cancellation cannot interrupt, so the process is ended with os._exit
    once cleanup has finished.

    Args:
        router: Router whose adapters are released
        status: Exit status when cleanup succeeds
    """
    logger.info("Shutting down gracefully...")
    try:
        await router.cleanup()
    except Exception:
        logger.exception("Cleanup failed during shutdown")
        status = 1
    finally:
        logging.shutdown()
        os._exit(status)


async def serve_stdio(router: Router) -> None:
    """
    Serve one MCP session over stdin/stdout.

    When stdin closes the session ends, the backends are released and this
    coroutine returns. SIGINT or SIGTERM releases the backends and exits the
    process with status 0 without waiting for the session.
    """
    server = create_mcp_server(router)

    loop = asyncio.get_running_loop()
    shutdown_tasks: List[asyncio.Task] = []

    def on_signal() -> None:
        if not shutdown_tasks:
            shutdown_tasks.append(loop.create_task(shutdown_and_exit(router)))

    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal)
            installed.append(sig)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    logger.info("MCP Gmail & PostgreSQL Server running on stdio")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
        logger.info("stdin closed, shutting down")
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await router.cleanup()


def run_server(settings: Optional[Settings] = None):
    """Run the MCP server with stdio transport (default for MCP)."""
    settings = settings or Settings.from_env()

    async def main():
        # Adapters are built inside the loop that will use the pool
        await serve_stdio(Router.from_settings(settings))

    asyncio.run(main())
