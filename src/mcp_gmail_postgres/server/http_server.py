"""
HTTP binding: MCP over Server-Sent Events, served by uvicorn.

Endpoints:
    GET  /          server metadata and the static tool-name list
    GET  /health    liveness check
    GET  /sse       opens an SSE stream carrying one MCP session
    POST /message   client-to-server messages for an open SSE session
                    (acknowledged with 202; replies travel over the stream)

Every SSE connection gets its own protocol Server instance, all sharing
one Router. Closing a stream ends that session only; the adapters are
released when the application shuts down.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..catalog import SERVER_VERSION, all_tool_names
from ..config import Settings
from .mcp_server import create_mcp_server
from .router import Router

logger = logging.getLogger(__name__)

SSE_PATH = "/sse"
MESSAGE_PATH = "/message"


class MessageEndpoint:
    """ASGI endpoint handing POSTed session messages to the SSE transport."""

    def __init__(self, transport: SseServerTransport):
        self.transport = transport

    async def __call__(self, scope, receive, send):
        await self.transport.handle_post_message(scope, receive, send)


def create_app(settings: Settings, router: Optional[Router] = None) -> Starlette:
    """
    Create the Starlette application.

    Args:
        settings: Server settings
        router: Shared router (default: built from settings at startup)

    Returns:
        ASGI application
    """
    sse = SseServerTransport(MESSAGE_PATH)

    async def info(request: Request) -> JSONResponse:
        return JSONResponse({
            "name": "MCP Gmail & PostgreSQL Server",
            "version": SERVER_VERSION,
            "transport": "SSE",
            "endpoints": {
                "health": "/health",
                "sse": SSE_PATH,
                "message": MESSAGE_PATH,
            },
            "tools": all_tool_names(),
        })

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    async def handle_sse(request: Request) -> Response:
        logger.info("[MCP] New SSE connection established")
        server = create_mcp_server(request.app.state.router)
        async with sse.connect_sse(request.scope, request.receive, request._send) as (
            read_stream,
            write_stream,
        ):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
        logger.info("[MCP] SSE connection closed")
        # The SSE transport has already sent the response
        return Response()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        if getattr(app.state, "router", None) is None:
            app.state.router = Router.from_settings(settings)
        await app.state.router.postgres.probe()
        try:
            yield
        finally:
            logger.info("Shutting down gracefully...")
            await app.state.router.cleanup()

    app = Starlette(
        routes=[
            Route("/", endpoint=info, methods=["GET"]),
            Route("/health", endpoint=health, methods=["GET"]),
            Route(SSE_PATH, endpoint=handle_sse, methods=["GET"]),
            Route(MESSAGE_PATH, endpoint=MessageEndpoint(sse), methods=["POST"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["Content-Type", "Authorization"],
            ),
        ],
        lifespan=lifespan,
    )
    app.state.router = router
    return app


def run_http_server(settings: Optional[Settings] = None, host: Optional[str] = None, port: Optional[int] = None):
    """Run the MCP server with HTTP/SSE transport."""
    settings = settings or Settings.from_env()
    host = host or settings.server.host
    port = port or settings.server.port

    logger.info("MCP Gmail & PostgreSQL Server (HTTP Mode)")
    logger.info("  Info:    http://%s:%s/", host, port)
    logger.info("  Health:  http://%s:%s/health", host, port)
    logger.info("  SSE:     http://%s:%s%s", host, port, SSE_PATH)

    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=settings.server.log_level.lower())
