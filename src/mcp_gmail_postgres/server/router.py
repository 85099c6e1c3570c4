"""
Dispatch router.

Transport-agnostic core of the server: the four MCP operations
(list_tools, call_tool, list_resources, read_resource) routed by tool name
prefix or resource URI scheme to the Gmail and PostgreSQL adapters. Both
the stdio and the HTTP/SSE bindings sit on top of one Router instance.
"""

import logging
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from ..catalog import (
    GMAIL_PREFIX,
    GMAIL_SCHEME,
    POSTGRES_PREFIX,
    POSTGRES_SCHEME,
    RESOURCES,
)
from ..config import Settings
from ..errors import UnknownResource, UnknownTool
from ..services import GmailService, PostgresService

logger = logging.getLogger(__name__)


class Router:
    """
    Routes protocol operations to the owning backend adapter.

    The router holds no per-request state. Adapter errors are relayed to
    the transport unchanged.
    """

    def __init__(self, gmail: GmailService, postgres: PostgresService):
        self.gmail = gmail
        self.postgres = postgres

    @classmethod
    def from_settings(cls, settings: Settings) -> "Router":
        """Build both adapters from settings."""
        return cls(
            gmail=GmailService(settings.gmail),
            postgres=PostgresService(settings.postgres),
        )

    async def list_tools(self) -> List[types.Tool]:
        """Gmail tools followed by PostgreSQL tools; unconfigured adapters contribute none."""
        return self.gmail.get_tools() + self.postgres.get_tools()

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> List[types.TextContent]:
        """
        Dispatch a tool call by name prefix.

        Args:
            name: Tool name
            arguments: Argument bag (default: empty)

        Returns:
            Text content list produced by the adapter

        Raises:
            UnknownTool: If the name has no known prefix
        """
        arguments = arguments or {}
        logger.info("Tool call: %s %s", name, arguments)

        if name.startswith(GMAIL_PREFIX):
            return await self.gmail.handle_tool(name, arguments)
        if name.startswith(POSTGRES_PREFIX):
            return await self.postgres.handle_tool(name, arguments)
        raise UnknownTool(name)

    async def list_resources(self) -> List[types.Resource]:
        """The static resource catalog, independent of adapter state."""
        return list(RESOURCES)

    async def read_resource(self, uri: str) -> List[ReadResourceContents]:
        """
        Dispatch a resource read by URI scheme.

        Raises:
            UnknownResource: If no adapter owns the scheme or the adapter
                does not know the URI
        """
        uri = str(uri)
        if uri.startswith(GMAIL_SCHEME):
            return await self.gmail.read_resource(uri)
        if uri.startswith(POSTGRES_SCHEME):
            return await self.postgres.read_resource(uri)
        raise UnknownResource(uri)

    async def cleanup(self) -> None:
        """Release both adapters' handles. Safe to call more than once."""
        await self.postgres.cleanup()
        await self.gmail.cleanup()
        logger.info("Backends released")
