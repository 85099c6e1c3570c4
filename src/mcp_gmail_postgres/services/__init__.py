"""
Backend adapters.

Each adapter owns one vendor handle (the Gmail API client or the
PostgreSQL pool), exposes its tool descriptors through `get_tools()`,
runs tools through `handle_tool(name, arguments)`, serves its resource
through `read_resource(uri)` and releases its handle in `cleanup()`.
"""

from .gmail_service import GmailService
from .postgres_service import PostgresService, is_select_statement

__all__ = [
    "GmailService",
    "PostgresService",
    "is_select_statement",
]
