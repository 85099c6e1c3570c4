"""Helpers that wrap backend payloads in MCP content envelopes."""

import json
from typing import Any, List

from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents

JSON_MIME_TYPE = "application/json"


def to_json(payload: Any) -> str:
    """Serialize a payload; values JSON cannot represent (dates, decimals) become strings."""
    return json.dumps(payload, indent=2, default=str)


def text_content(payload: Any) -> List[types.TextContent]:
    """Wrap a payload as the single text item of a tool result."""
    return [types.TextContent(type="text", text=to_json(payload))]


def resource_contents(text: str) -> List[ReadResourceContents]:
    """Wrap already-serialized JSON text as resource contents."""
    return [ReadResourceContents(content=text, mime_type=JSON_MIME_TYPE)]
