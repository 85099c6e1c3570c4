"""
Typed argument records for every tool.

Each record is built from the raw MCP argument bag with `from_arguments`,
which applies defaults and rejects malformed input with InvalidArguments
before any vendor call is made. Field names follow Python conventions;
the argument bag keys follow the camelCase names in the tool schemas.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import InvalidArguments

EMAIL_FORMATS = ("full", "metadata", "minimal", "raw")


def _required_str(tool: str, arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if value is None:
        raise InvalidArguments(tool, f"'{key}' is required")
    if not isinstance(value, str):
        raise InvalidArguments(tool, f"'{key}' must be a string")
    return value


def _optional_str(tool: str, arguments: Dict[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArguments(tool, f"'{key}' must be a string")
    return value


def _optional_int(tool: str, arguments: Dict[str, Any], key: str, default: int) -> int:
    value = arguments.get(key)
    if value is None:
        return default
    # bool is an int subclass; JSON numbers may arrive as floats
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArguments(tool, f"'{key}' must be a number")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidArguments(tool, f"'{key}' must be a whole number")
    return int(value)


def _optional_list(tool: str, arguments: Dict[str, Any], key: str) -> Optional[List[Any]]:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise InvalidArguments(tool, f"'{key}' must be an array")
    return value


# Gmail

@dataclass
class ListEmailsArgs:
    """Arguments for gmail_list_emails."""
    query: Optional[str] = None
    max_results: int = 10
    label_ids: Optional[List[str]] = None

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any]) -> "ListEmailsArgs":
        tool = "gmail_list_emails"
        label_ids = _optional_list(tool, arguments, "labelIds")
        if label_ids is not None and not all(isinstance(label, str) for label in label_ids):
            raise InvalidArguments(tool, "'labelIds' must be an array of strings")
        return cls(
            query=_optional_str(tool, arguments, "query"),
            max_results=_optional_int(tool, arguments, "maxResults", 10),
            label_ids=label_ids,
        )


@dataclass
class ReadEmailArgs:
    """Arguments for gmail_read_email."""
    message_id: str
    format: str = "full"

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any]) -> "ReadEmailArgs":
        tool = "gmail_read_email"
        message_format = _optional_str(tool, arguments, "format") or "full"
        if message_format not in EMAIL_FORMATS:
            raise InvalidArguments(
                tool, f"'format' must be one of {', '.join(EMAIL_FORMATS)}"
            )
        return cls(
            message_id=_required_str(tool, arguments, "messageId"),
            format=message_format,
        )


@dataclass
class SendEmailArgs:
    """Arguments for gmail_send_email."""
    to: str
    subject: str
    body: str
    html_body: Optional[str] = None
    cc: Optional[str] = None
    bcc: Optional[str] = None

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any]) -> "SendEmailArgs":
        tool = "gmail_send_email"
        return cls(
            to=_required_str(tool, arguments, "to"),
            subject=_required_str(tool, arguments, "subject"),
            body=_required_str(tool, arguments, "body"),
            html_body=_optional_str(tool, arguments, "htmlBody"),
            cc=_optional_str(tool, arguments, "cc"),
            bcc=_optional_str(tool, arguments, "bcc"),
        )


# PostgreSQL

@dataclass
class QueryArgs:
    """Arguments for postgres_query and postgres_execute."""
    query: str
    params: List[Any] = field(default_factory=list)

    @classmethod
    def from_arguments(cls, tool: str, arguments: Dict[str, Any]) -> "QueryArgs":
        return cls(
            query=_required_str(tool, arguments, "query"),
            params=_optional_list(tool, arguments, "params") or [],
        )


@dataclass
class GetTablesArgs:
    """Arguments for postgres_get_tables."""
    schema: str = "public"

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any]) -> "GetTablesArgs":
        return cls(
            schema=_optional_str("postgres_get_tables", arguments, "schema") or "public",
        )


@dataclass
class GetTableSchemaArgs:
    """Arguments for postgres_get_table_schema."""
    table_name: str
    schema: str = "public"

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any]) -> "GetTableSchemaArgs":
        tool = "postgres_get_table_schema"
        return cls(
            table_name=_required_str(tool, arguments, "tableName"),
            schema=_optional_str(tool, arguments, "schema") or "public",
        )
