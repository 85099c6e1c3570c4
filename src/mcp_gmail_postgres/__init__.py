"""
Gmail & PostgreSQL MCP Server.

Exposes a Gmail mailbox and a PostgreSQL database to AI agents as Model
Context Protocol tools and resources:

- gmail_list_emails, gmail_read_email, gmail_send_email, gmail_get_labels
- postgres_query (SELECT only), postgres_execute (writes only),
  postgres_get_tables, postgres_get_table_schema
- Resources gmail://inbox and postgres://connection

Served over stdio or over HTTP with Server-Sent Events. Each backend is
enabled only when its credentials are present in the environment.
"""

from .config import Settings
from .errors import (
    BackendFailure,
    InvalidArguments,
    MCPServerError,
    NotConfigured,
    UnknownResource,
    UnknownTool,
    WrongOperationKind,
)

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "MCPServerError",
    "NotConfigured",
    "UnknownTool",
    "UnknownResource",
    "InvalidArguments",
    "WrongOperationKind",
    "BackendFailure",
]
