"""
PostgreSQL adapter.

Wraps a psycopg async connection pool behind four MCP tools. Reads and
writes go through separate tools, and the split is enforced by a textual
prefix check on the statement (see is_select_statement), not by parsing
SQL.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from ..catalog import POSTGRES_CONNECTION_URI, POSTGRES_TOOLS
from ..config import PostgresSettings
from ..errors import (
    BackendFailure,
    NotConfigured,
    UnknownResource,
    UnknownTool,
    WrongOperationKind,
)
from .arguments import GetTableSchemaArgs, GetTablesArgs, QueryArgs
from .envelope import resource_contents, text_content, to_json

logger = logging.getLogger(__name__)

SERVICE_NAME = "PostgreSQL"

GET_TABLES_SQL = """
    SELECT table_name, table_type
    FROM information_schema.tables
    WHERE table_schema = %s
    ORDER BY table_name
"""

GET_TABLE_SCHEMA_SQL = """
    SELECT
        column_name,
        data_type,
        is_nullable,
        column_default,
        character_maximum_length,
        numeric_precision,
        numeric_scale
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position
"""


def is_select_statement(query: str) -> bool:
    """
    Classify a statement as a read by its leading keyword.

    Only the trimmed, uppercased prefix is inspected. A statement starting
    with WITH is never a SELECT here, even when the CTE only reads.
    """
    return query.strip().upper().startswith("SELECT")


def build_pool(settings: PostgresSettings) -> Optional[AsyncConnectionPool]:
    """
    Create the (unopened) connection pool, or None when no password is set.

    Args:
        settings: PostgreSQL settings

    Returns:
        AsyncConnectionPool that opens on first use, or None
    """
    if not settings.password:
        logger.warning("[PostgreSQL] Password not configured")
        return None

    return AsyncConnectionPool(
        settings.conninfo(),
        min_size=1,
        max_size=settings.pool_max_size,
        max_idle=settings.idle_timeout,
        timeout=float(settings.connect_timeout),
        kwargs={"row_factory": dict_row},
        open=False,
    )


class PostgresService:
    """
    PostgreSQL backend adapter.

    Owns one connection pool shared by all concurrent calls; the pool caps
    concurrency at its max size. Without a password the adapter stays
    unconfigured: it lists no tools and every call raises NotConfigured.
    """

    def __init__(self, settings: PostgresSettings, pool: Any = None):
        """
        Initialize the adapter.

        Args:
            settings: PostgreSQL settings
            pool: Prebuilt pool (default: built from settings)
        """
        self.settings = settings
        self._pool = pool if pool is not None else build_pool(settings)
        self._opened = False
        self._open_lock = asyncio.Lock()
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "postgres_query": self._query,
            "postgres_execute": self._execute_write,
            "postgres_get_tables": self._get_tables,
            "postgres_get_table_schema": self._get_table_schema,
        }

    @property
    def configured(self) -> bool:
        return self._pool is not None

    def get_tools(self) -> List[types.Tool]:
        """Tool descriptors, or an empty list when unconfigured."""
        if not self.configured:
            return []
        return list(POSTGRES_TOOLS)

    async def handle_tool(self, name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        """
        Run one PostgreSQL tool.

        Args:
            name: Tool name (postgres_*)
            arguments: Raw argument bag

        Returns:
            Single-item text content list with the JSON payload

        Raises:
            NotConfigured: If no password is configured
            UnknownTool: If the name is not a PostgreSQL tool
            InvalidArguments: If the argument bag is malformed
            WrongOperationKind: If the statement kind does not match the tool
            BackendFailure: If the driver or the pool fails
        """
        if not self.configured:
            raise NotConfigured(
                SERVICE_NAME, "Please check your database credentials."
            )

        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownTool(name)
        return text_content(await handler(arguments))

    async def read_resource(self, uri: str) -> List[ReadResourceContents]:
        """Read postgres://connection: a liveness probe plus target database and host."""
        if uri != POSTGRES_CONNECTION_URI:
            raise UnknownResource(uri)

        status = "disconnected"
        if self.configured:
            try:
                await self._fetch("connection_status", "SELECT 1")
                status = "connected"
            except BackendFailure as exc:
                logger.warning("[PostgreSQL] Connection probe failed: %s", exc)
                status = "error"

        return resource_contents(to_json({
            "status": status,
            "database": self.settings.database,
            "host": self.settings.host,
        }))

    async def probe(self) -> bool:
        """Test the connection at startup; failures are logged, not raised."""
        if not self.configured:
            return False
        try:
            await self._fetch("connection_test", "SELECT NOW()")
        except BackendFailure:
            logger.exception("[PostgreSQL] Connection test failed")
            return False
        logger.info(
            "[PostgreSQL] Connected to %s@%s:%s",
            self.settings.database, self.settings.host, self.settings.port,
        )
        return True

    async def cleanup(self) -> None:
        """Drain and close the pool."""
        if self._pool is not None:
            if self._opened:
                await self._pool.close()
            self._pool = None
            self._opened = False

    async def _get_pool(self):
        """Open the pool on first use."""
        async with self._open_lock:
            if not self._opened:
                await self._pool.open()
                self._opened = True
        return self._pool

    async def _fetch(self, operation: str, sql: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        """
        Run one statement on a pooled connection.

        Parameters are only bound when non-empty, so parameterless SQL may
        contain a literal '%'. The connection commits when the block exits
        without error.

        Returns:
            Dict with rows, description, rowcount and statusmessage
        """
        try:
            pool = await self._get_pool()
            async with pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(sql, params or None)
                    rows = await cur.fetchall() if cur.description is not None else []
                    return {
                        "rows": rows,
                        "description": cur.description,
                        "rowcount": cur.rowcount,
                        "statusmessage": cur.statusmessage,
                    }
        except Exception as exc:
            raise BackendFailure(SERVICE_NAME, operation, exc) from exc

    async def _query(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = QueryArgs.from_arguments("postgres_query", arguments)
        if not is_select_statement(args.query):
            raise WrongOperationKind(
                "postgres_query",
                "postgres_query only accepts SELECT queries. "
                "Use postgres_execute for write operations.",
            )

        result = await self._fetch("query", args.query, args.params)
        rowcount = result["rowcount"]
        return {
            "rows": result["rows"],
            "rowCount": rowcount if rowcount is not None and rowcount >= 0 else 0,
            "fields": [
                {"name": column.name, "dataTypeID": column.type_code}
                for column in result["description"] or []
            ],
        }

    async def _execute_write(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = QueryArgs.from_arguments("postgres_execute", arguments)
        if is_select_statement(args.query):
            raise WrongOperationKind(
                "postgres_execute",
                "postgres_execute is for write operations. "
                "Use postgres_query for SELECT queries.",
            )

        result = await self._fetch("execute", args.query, args.params)
        rowcount = result["rowcount"]
        status = result["statusmessage"]
        return {
            "success": True,
            "rowCount": rowcount if rowcount is not None and rowcount >= 0 else None,
            "command": status.split()[0] if status else None,
        }

    async def _get_tables(self, arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
        args = GetTablesArgs.from_arguments(arguments)
        result = await self._fetch("get_tables", GET_TABLES_SQL, [args.schema])
        return result["rows"]

    async def _get_table_schema(self, arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
        args = GetTableSchemaArgs.from_arguments(arguments)
        result = await self._fetch(
            "get_table_schema", GET_TABLE_SCHEMA_SQL, [args.schema, args.table_name]
        )
        return result["rows"]
