"""
Error taxonomy for the Gmail & PostgreSQL MCP server.

Every failure reaches the MCP client as a single descriptive error. The
router does not distinguish between these kinds when relaying them; the
classes exist so callers and tests can tell failures apart.
"""

from typing import Optional


class MCPServerError(Exception):
    """Base class for all errors raised by this server."""


class NotConfigured(MCPServerError):
    """
    Raised when a tool is called on an adapter that is missing credentials.
    Listing tools never raises this; an unconfigured adapter lists no tools.
    """

    def __init__(self, service: str, hint: Optional[str] = None):
        self.service = service
        message = f"{service} service not initialized."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class UnknownTool(MCPServerError):
    """Raised when a tool name matches no adapter or no handler."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class UnknownResource(MCPServerError):
    """Raised when a resource URI matches no adapter or no handler."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class InvalidArguments(MCPServerError):
    """Raised when a tool's argument bag is missing fields or has wrong types."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(f"Invalid arguments for {tool}: {message}")


class WrongOperationKind(MCPServerError):
    """Raised when a SELECT reaches postgres_execute or a write reaches postgres_query."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(message)


class BackendFailure(MCPServerError):
    """
    Wraps any error raised by a vendor SDK or the SQL driver.

    The message names the originating service and operation so the client
    can tell which backend failed.
    """

    def __init__(self, service: str, operation: str, cause: BaseException):
        self.service = service
        self.operation = operation
        self.cause = cause
        super().__init__(f"{service} operation '{operation}' failed: {cause}")
