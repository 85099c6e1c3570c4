"""
MCP server bindings.

The Router implements the four protocol operations once; two transports
bind it to the wire:

### stdio (for Claude Desktop and other subprocess-spawning clients)
    mcp-gmail-postgres stdio

### HTTP/SSE (for n8n and other web clients)
    mcp-gmail-postgres http --port 3000

Both transports can run in the same codebase without duplicating dispatch
logic; each only translates its wire format to and from Router calls.
"""

from .router import Router
from .mcp_server import create_mcp_server, run_server, serve_stdio
from .http_server import create_app, run_http_server

__all__ = [
    "Router",
    "create_mcp_server",
    "serve_stdio",
    "run_server",
    "create_app",
    "run_http_server",
]
