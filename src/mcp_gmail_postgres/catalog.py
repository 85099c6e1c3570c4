"""
Static catalog of tool and resource descriptors.

Tool names carry the owning adapter as a prefix ("gmail_" or "postgres_"),
which is what the router dispatches on. Every inputSchema follows JSON
Schema with "type": "object".
"""

from typing import List

from mcp import types

GMAIL_PREFIX = "gmail_"
POSTGRES_PREFIX = "postgres_"

GMAIL_SCHEME = "gmail://"
POSTGRES_SCHEME = "postgres://"

GMAIL_INBOX_URI = "gmail://inbox"
POSTGRES_CONNECTION_URI = "postgres://connection"

SERVER_NAME = "mcp-gmail-postgres-server"
SERVER_VERSION = "1.0.0"


GMAIL_TOOLS: List[types.Tool] = [
    types.Tool(
        name="gmail_list_emails",
        description="List emails from Gmail inbox. Can filter by query, maxResults, and labelIds.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": 'Search query string (e.g., "from:example@gmail.com subject:test")',
                },
                "maxResults": {
                    "type": "number",
                    "description": "Maximum number of emails to return (default: 10)",
                    "default": 10,
                },
                "labelIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'Array of label IDs to filter by (e.g., ["INBOX", "UNREAD"])',
                },
            },
        },
    ),
    types.Tool(
        name="gmail_read_email",
        description="Read a specific email by its message ID",
        inputSchema={
            "type": "object",
            "properties": {
                "messageId": {
                    "type": "string",
                    "description": "The ID of the email message to read",
                },
                "format": {
                    "type": "string",
                    "enum": ["full", "metadata", "minimal", "raw"],
                    "description": "Format of the email response (default: full)",
                    "default": "full",
                },
            },
            "required": ["messageId"],
        },
    ),
    types.Tool(
        name="gmail_send_email",
        description="Send an email via Gmail",
        inputSchema={
            "type": "object",
            "properties": {
                "to": {"type": "string", "description": "Recipient email address"},
                "subject": {"type": "string", "description": "Email subject"},
                "body": {"type": "string", "description": "Email body (plain text)"},
                "htmlBody": {"type": "string", "description": "Email body (HTML, optional)"},
                "cc": {"type": "string", "description": "CC email address (optional)"},
                "bcc": {"type": "string", "description": "BCC email address (optional)"},
            },
            "required": ["to", "subject", "body"],
        },
    ),
    types.Tool(
        name="gmail_get_labels",
        description="Get list of all Gmail labels",
        inputSchema={"type": "object", "properties": {}},
    ),
]


POSTGRES_TOOLS: List[types.Tool] = [
    types.Tool(
        name="postgres_query",
        description=(
            "Execute a SELECT query on PostgreSQL database. Returns read-only results. "
            "Use %s placeholders for parameters."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "SQL SELECT query to execute"},
                "params": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional parameters for parameterized query",
                },
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name="postgres_execute",
        description=(
            "Execute a write operation (INSERT, UPDATE, DELETE) on PostgreSQL database. "
            "Use %s placeholders for parameters."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "SQL query to execute (INSERT, UPDATE, DELETE)",
                },
                "params": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional parameters for parameterized query",
                },
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name="postgres_get_tables",
        description="Get list of all tables in the database",
        inputSchema={
            "type": "object",
            "properties": {
                "schema": {
                    "type": "string",
                    "description": "Schema name (default: public)",
                    "default": "public",
                },
            },
        },
    ),
    types.Tool(
        name="postgres_get_table_schema",
        description="Get schema information for a specific table",
        inputSchema={
            "type": "object",
            "properties": {
                "tableName": {"type": "string", "description": "Name of the table"},
                "schema": {
                    "type": "string",
                    "description": "Schema name (default: public)",
                    "default": "public",
                },
            },
            "required": ["tableName"],
        },
    ),
]


RESOURCES: List[types.Resource] = [
    types.Resource(
        uri=GMAIL_INBOX_URI,
        name="Gmail Inbox",
        mimeType="application/json",
        description="Access to Gmail inbox",
    ),
    types.Resource(
        uri=POSTGRES_CONNECTION_URI,
        name="PostgreSQL Connection",
        mimeType="application/json",
        description="PostgreSQL database connection status",
    ),
]


def all_tool_names() -> List[str]:
    """Names of every tool this server can expose, configured or not."""
    return [tool.name for tool in GMAIL_TOOLS + POSTGRES_TOOLS]
