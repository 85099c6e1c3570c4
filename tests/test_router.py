"""
Tests for the dispatch router and its MCP protocol binding.

TestRouter calls the router directly. TestMCPProtocol drives the same
router through a real MCP client session over in-memory streams, which
checks the tools/list, tools/call, resources/list and resources/read
wire shapes the SDK produces.
"""

import json

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from pydantic import AnyUrl

from mcp_gmail_postgres.errors import NotConfigured, UnknownResource, UnknownTool
from mcp_gmail_postgres.server.mcp_server import create_mcp_server

from conftest import Column, FakeResult, b64url


class TestRouter:
    """Tests for routing by tool name prefix and resource URI scheme."""

    @pytest.mark.asyncio
    async def test_list_tools_concatenates_adapters(self, router):
        """Gmail tools come first, then PostgreSQL tools."""
        names = [tool.name for tool in await router.list_tools()]

        assert names == [
            "gmail_list_emails",
            "gmail_read_email",
            "gmail_send_email",
            "gmail_get_labels",
            "postgres_query",
            "postgres_execute",
            "postgres_get_tables",
            "postgres_get_table_schema",
        ]

    @pytest.mark.asyncio
    async def test_list_tools_unconfigured(self, unconfigured_router):
        """Unconfigured adapters contribute no tools."""
        assert await unconfigured_router.list_tools() == []

    @pytest.mark.asyncio
    async def test_list_tools_partial(self, gmail_service):
        """One configured adapter lists tools while the other lists none."""
        from mcp_gmail_postgres.config import PostgresSettings
        from mcp_gmail_postgres.server.router import Router
        from mcp_gmail_postgres.services import PostgresService

        router = Router(gmail=gmail_service, postgres=PostgresService(PostgresSettings()))
        names = [tool.name for tool in await router.list_tools()]

        assert len(names) == 4
        assert all(name.startswith("gmail_") for name in names)
        with pytest.raises(NotConfigured):
            await router.call_tool("postgres_get_tables", {})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [None, {}, {"x": 1}, {"query": "SELECT 1"}])
    async def test_unknown_tool(self, router, arguments):
        """Names without a known prefix fail regardless of arguments."""
        with pytest.raises(UnknownTool):
            await router.call_tool("foo_bar", arguments)

    @pytest.mark.asyncio
    async def test_call_routes_to_postgres(self, router, fake_pool):
        """postgres_ names reach the PostgreSQL adapter."""
        fake_pool.results.append(FakeResult(rows=[], columns=[Column("table_name", 19)]))

        result = await router.call_tool("postgres_get_tables")

        assert json.loads(result[0].text) == []
        assert fake_pool.executed[0][1] == ["public"]

    @pytest.mark.asyncio
    async def test_call_routes_to_gmail(self, router, fake_gmail):
        """gmail_ names reach the Gmail adapter."""
        fake_gmail.users.return_value.labels.return_value.list.return_value.execute.return_value = {}

        result = await router.call_tool("gmail_get_labels", {})

        assert json.loads(result[0].text) == []

    @pytest.mark.asyncio
    async def test_list_resources_static(self, unconfigured_router):
        """Both resources are listed even when nothing is configured."""
        uris = [str(resource.uri) for resource in await unconfigured_router.list_resources()]

        assert uris == ["gmail://inbox", "postgres://connection"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("uri", ["file:///etc/passwd", "gmail://drafts", "postgres://nope"])
    async def test_unknown_resource(self, router, uri):
        """Unknown schemes and unknown URIs within a scheme both fail."""
        with pytest.raises(UnknownResource):
            await router.read_resource(uri)

    @pytest.mark.asyncio
    async def test_cleanup_releases_both(self, router, fake_gmail):
        """cleanup releases the Gmail client and the pool."""
        await router.cleanup()

        fake_gmail.close.assert_called_once()
        assert router.gmail.configured is False
        assert router.postgres.configured is False


class TestMCPProtocol:
    """Protocol-level tests through an in-memory MCP client session."""

    @pytest.fixture(autouse=True)
    def setup(self, router, fake_pool, fake_gmail):
        self.server = create_mcp_server(router)
        self.pool = fake_pool
        self.gmail = fake_gmail

    @pytest.mark.asyncio
    async def test_tools_list_has_input_schemas(self):
        """Every tool exposes an object inputSchema."""
        async with create_connected_server_and_client_session(self.server) as client:
            result = await client.list_tools()

        assert len(result.tools) == 8
        for tool in result.tools:
            assert tool.description
            assert tool.inputSchema["type"] == "object"

    @pytest.mark.asyncio
    async def test_tool_call_returns_text_content(self):
        """A successful call returns one text item holding JSON."""
        self.gmail.users.return_value.messages.return_value.get.return_value.execute.return_value = {
            "id": "m1",
            "payload": {"body": {"data": b64url("hi")}},
        }

        async with create_connected_server_and_client_session(self.server) as client:
            result = await client.call_tool("gmail_read_email", {"messageId": "m1"})

        assert result.isError is False
        assert len(result.content) == 1
        assert result.content[0].type == "text"
        assert json.loads(result.content[0].text)["body"] == "hi"

    @pytest.mark.asyncio
    async def test_unknown_tool_is_error_result(self):
        """Unknown tools come back as isError results, not crashes."""
        async with create_connected_server_and_client_session(self.server) as client:
            result = await client.call_tool("foo_bar", {})

        assert result.isError is True
        assert "Unknown tool: foo_bar" in result.content[0].text

    @pytest.mark.asyncio
    async def test_wrong_operation_kind_is_error_result(self):
        """A rejected DELETE is reported as an error and never executed."""
        async with create_connected_server_and_client_session(self.server) as client:
            result = await client.call_tool("postgres_query", {"query": "DELETE FROM x"})

        assert result.isError is True
        assert "only accepts SELECT" in result.content[0].text
        assert self.pool.executed == []

    @pytest.mark.asyncio
    async def test_session_survives_failed_call(self):
        """A failed call does not end the session."""
        self.pool.results.append(FakeResult(error=RuntimeError("boom")))
        self.pool.results.append(FakeResult(rowcount=1, statusmessage="DELETE 1"))

        async with create_connected_server_and_client_session(self.server) as client:
            failed = await client.call_tool("postgres_execute", {"query": "DELETE FROM x"})
            succeeded = await client.call_tool("postgres_execute", {"query": "DELETE FROM x"})

        assert failed.isError is True
        assert "PostgreSQL operation 'execute' failed: boom" in failed.content[0].text
        assert succeeded.isError is False

    @pytest.mark.asyncio
    async def test_resources_list_and_read(self):
        """Resources are listed and postgres://connection is readable."""
        self.pool.results.append(FakeResult(rows=[{"?column?": 1}], columns=[Column("?column?", 23)]))

        async with create_connected_server_and_client_session(self.server) as client:
            listed = await client.list_resources()
            read = await client.read_resource(AnyUrl("postgres://connection"))

        assert [str(r.uri) for r in listed.resources] == ["gmail://inbox", "postgres://connection"]
        contents = read.contents[0]
        assert contents.mimeType == "application/json"
        assert json.loads(contents.text)["status"] == "connected"

    @pytest.mark.asyncio
    async def test_unknown_resource_is_protocol_error(self):
        """Reading an unknown resource fails with a protocol error."""
        async with create_connected_server_and_client_session(self.server) as client:
            with pytest.raises(McpError):
                await client.read_resource(AnyUrl("ftp://example.com/x"))
