"""
Gmail adapter.

Wraps the Gmail v1 API (google-api-python-client) behind four MCP tools:
list, read, send and labels. The API client is built once from OAuth2
refresh-token credentials; google-auth refreshes the access token on
demand, and an expired or revoked refresh token surfaces as a
BackendFailure on the next call.

The discovery client is blocking, so each request runs in a worker thread
to keep the event loop free for other MCP requests. httplib2 transports are
not thread-safe, so every request executes over its own authorized
httplib2.Http while the Resource and credentials are shared.
"""

import asyncio
import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from ..catalog import GMAIL_INBOX_URI, GMAIL_TOOLS
from ..config import GmailSettings
from ..errors import BackendFailure, NotConfigured, UnknownResource, UnknownTool
from .arguments import ListEmailsArgs, ReadEmailArgs, SendEmailArgs
from .envelope import resource_contents, text_content, to_json

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gmail"
TOKEN_URI = "https://oauth2.googleapis.com/token"
PART_SEPARATOR = "\n---\n"
INBOX_PAGE_SIZE = 20


def decode_base64url(data: str) -> str:
    """Decode Gmail's unpadded base64url body data to text."""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def encode_base64url(text: str) -> str:
    """Encode text as base64url with the trailing '=' padding stripped."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def build_raw_message(args: SendEmailArgs) -> str:
    """
    Build the RFC 2822 message text for gmail_send_email.

    Cc and Bcc lines are only present when given. When an HTML body is
    given it replaces the plain body and switches the Content-Type. Empty
    lines are dropped before joining, including the header separator and
    an empty body.

    Args:
        args: Validated send arguments

    Returns:
        CRLF-joined message text (not yet encoded)
    """
    content_type = "text/html" if args.html_body else "text/plain"
    headers = [f"To: {args.to}"]
    if args.cc:
        headers.append(f"Cc: {args.cc}")
    if args.bcc:
        headers.append(f"Bcc: {args.bcc}")
    headers.append(f"Subject: {args.subject}")
    headers.append(f"Content-Type: {content_type}; charset=utf-8")

    email_body = args.html_body or args.body
    lines = headers + ["", email_body]
    return "\r\n".join(line for line in lines if line != "")


def parse_message(message: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reshape a Gmail message resource into the read_email payload.

    Header names are lowercased. The body is the top-level payload body if
    it carries data, otherwise every top-level part body joined with a
    "---" separator line.

    Args:
        message: Message resource as returned by users.messages.get

    Returns:
        Dict with id, threadId, labelIds, snippet and optional headers/body
    """
    email: Dict[str, Any] = {
        "id": message.get("id") or None,
        "threadId": message.get("threadId") or None,
        "labelIds": message.get("labelIds") or None,
        "snippet": message.get("snippet") or None,
    }

    payload = message.get("payload") or {}

    if payload.get("headers"):
        headers = {}
        for header in payload["headers"]:
            name = header.get("name")
            value = header.get("value")
            if name and value:
                headers[name.lower()] = value
        email["headers"] = headers

    body_data = (payload.get("body") or {}).get("data")
    if body_data:
        email["body"] = decode_base64url(body_data)
    elif payload.get("parts"):
        bodies = []
        for part in payload["parts"]:
            part_data = (part.get("body") or {}).get("data")
            if part_data:
                bodies.append(decode_base64url(part_data))
        email["body"] = PART_SEPARATOR.join(bodies)

    return email


def build_credentials(settings: GmailSettings) -> Optional[Credentials]:
    """
    Build refresh-token credentials, or None when any part is missing.

    Args:
        settings: Gmail OAuth2 settings

    Returns:
        google.oauth2 Credentials without an access token, or None
    """
    if not settings.has_client:
        logger.warning("[Gmail] Client ID or Secret not configured")
        return None
    if not settings.refresh_token:
        logger.warning("[Gmail] Refresh token not configured")
        return None

    credentials = Credentials(
        token=None,
        refresh_token=settings.refresh_token,
        token_uri=TOKEN_URI,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
    )
    return credentials


def build_gmail_client(credentials: Credentials):
    """Build the gmail v1 discovery Resource for the given credentials."""
    return build("gmail", "v1", credentials=credentials, cache_discovery=False)


class GmailService:
    """
    Gmail backend adapter.

    Owns one API client and one set of credentials for the lifetime of the
    process. Each request gets a fresh HTTP transport. When
    credentials are missing the adapter stays unconfigured: it lists no
    tools and every call raises NotConfigured.
    """

    def __init__(self, settings: GmailSettings, client: Any = None, credentials: Any = None):
        """
        Initialize the adapter.

        Args:
            settings: Gmail OAuth2 settings
            client: Prebuilt API client (default: built from settings)
            credentials: Credentials for per-request transports (default:
                built from settings when no client is given)
        """
        self.settings = settings
        if client is None:
            credentials = build_credentials(settings)
            if credentials is not None:
                client = build_gmail_client(credentials)
        self._gmail = client
        self._credentials = credentials
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "gmail_list_emails": self._list_emails,
            "gmail_read_email": self._read_email,
            "gmail_send_email": self._send_email,
            "gmail_get_labels": self._get_labels,
        }

    @property
    def configured(self) -> bool:
        return self._gmail is not None

    def get_tools(self) -> List[types.Tool]:
        """Tool descriptors, or an empty list when unconfigured."""
        if not self.configured:
            return []
        return list(GMAIL_TOOLS)

    async def handle_tool(self, name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        """
        Run one Gmail tool.

        Args:
            name: Tool name (gmail_*)
            arguments: Raw argument bag

        Returns:
            Single-item text content list with the JSON payload

        Raises:
            NotConfigured: If credentials are missing
            UnknownTool: If the name is not a Gmail tool
            InvalidArguments: If the argument bag is malformed
            BackendFailure: If the Gmail API call fails
        """
        if not self.configured:
            raise NotConfigured(SERVICE_NAME, "Please check your Gmail credentials.")

        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownTool(name)
        return text_content(await handler(arguments))

    async def read_resource(self, uri: str) -> List[ReadResourceContents]:
        """Read gmail://inbox: the 20 most recent messages as {id, threadId}."""
        if uri != GMAIL_INBOX_URI:
            raise UnknownResource(uri)
        if not self.configured:
            raise NotConfigured(SERVICE_NAME, "Please check your Gmail credentials.")

        emails = await self._list_emails({"maxResults": INBOX_PAGE_SIZE})
        return resource_contents(to_json(emails))

    async def cleanup(self) -> None:
        """Release the API client's HTTP transport."""
        if self._gmail is not None:
            close = getattr(self._gmail, "close", None)
            if close is not None:
                close()
            self._gmail = None
            self._credentials = None

    async def _execute(self, operation: str, make_request: Callable[[], Any]) -> Dict[str, Any]:
        """Build and execute one API request off the event loop."""
        try:
            return await asyncio.to_thread(self._run_request, make_request)
        except Exception as exc:
            raise BackendFailure(SERVICE_NAME, operation, exc) from exc

    def _run_request(self, make_request: Callable[[], Any]) -> Dict[str, Any]:
        request = make_request()
        if self._credentials is None:
            return request.execute()

        transport = httplib2.Http()
        try:
            return request.execute(http=AuthorizedHttp(self._credentials, http=transport))
        finally:
            transport.close()

    async def _list_emails(self, arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
        args = ListEmailsArgs.from_arguments(arguments)

        params: Dict[str, Any] = {"userId": "me", "maxResults": args.max_results}
        if args.query is not None:
            params["q"] = args.query
        if args.label_ids is not None:
            params["labelIds"] = args.label_ids

        response = await self._execute(
            "list_emails",
            lambda: self._gmail.users().messages().list(**params),
        )
        return [
            {"id": msg.get("id") or None, "threadId": msg.get("threadId") or None}
            for msg in response.get("messages") or []
        ]

    async def _read_email(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = ReadEmailArgs.from_arguments(arguments)
        message = await self._execute(
            "read_email",
            lambda: self._gmail.users().messages().get(
                userId="me", id=args.message_id, format=args.format
            ),
        )
        return parse_message(message)

    async def _send_email(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = SendEmailArgs.from_arguments(arguments)
        raw = encode_base64url(build_raw_message(args))

        response = await self._execute(
            "send_email",
            lambda: self._gmail.users().messages().send(userId="me", body={"raw": raw}),
        )
        logger.info("Sent email to %s (id=%s)", args.to, response.get("id"))
        return {
            "success": True,
            "messageId": response.get("id"),
            "threadId": response.get("threadId"),
        }

    async def _get_labels(self, arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
        response = await self._execute(
            "get_labels",
            lambda: self._gmail.users().labels().list(userId="me"),
        )
        return response.get("labels") or []
