"""
Shared fixtures: in-memory fakes for the Gmail API client and the psycopg pool.

The fakes record every call so tests can assert on what would have reached
the vendor, including that nothing reached it at all.
"""

import base64
from collections import namedtuple
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from mcp_gmail_postgres.config import GmailSettings, PostgresSettings
from mcp_gmail_postgres.server.router import Router
from mcp_gmail_postgres.services import GmailService, PostgresService

Column = namedtuple("Column", ["name", "type_code"])


def b64url(text: str) -> str:
    """Encode text the way Gmail returns body data (base64url, unpadded)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


@dataclass
class FakeResult:
    """What the fake cursor reports for one executed statement."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: Optional[List[Column]] = None
    rowcount: int = -1
    statusmessage: Optional[str] = None
    error: Optional[Exception] = None


class FakeCursor:
    def __init__(self, pool: "FakePool"):
        self._pool = pool
        self._rows: List[Dict[str, Any]] = []
        self.description = None
        self.rowcount = -1
        self.statusmessage = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def execute(self, sql, params=None):
        self._pool.executed.append((sql, params))
        result = self._pool.results.pop(0) if self._pool.results else FakeResult()
        if result.error is not None:
            raise result.error
        self._rows = result.rows
        self.description = result.columns
        self.rowcount = result.rowcount
        self.statusmessage = result.statusmessage

    async def fetchall(self):
        return self._rows


class FakeConnection:
    def __init__(self, pool: "FakePool"):
        self._pool = pool

    def cursor(self):
        return FakeCursor(self._pool)


class FakePool:
    """Stands in for psycopg_pool.AsyncConnectionPool."""

    def __init__(self):
        self.results: List[FakeResult] = []
        self.executed: List[tuple] = []
        self.open_calls = 0
        self.closed = False

    async def open(self):
        self.open_calls += 1

    async def close(self):
        self.closed = True

    @asynccontextmanager
    async def connection(self):
        yield FakeConnection(self)


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def fake_gmail():
    """MagicMock shaped like the googleapiclient gmail v1 Resource."""
    return MagicMock()


@pytest.fixture
def gmail_service(fake_gmail):
    return GmailService(GmailSettings(), client=fake_gmail)


@pytest.fixture
def postgres_settings():
    return PostgresSettings(host="db.internal", database="app", password="secret")


@pytest.fixture
def postgres_service(postgres_settings, fake_pool):
    return PostgresService(postgres_settings, pool=fake_pool)


@pytest.fixture
def router(gmail_service, postgres_service):
    return Router(gmail=gmail_service, postgres=postgres_service)


@pytest.fixture
def unconfigured_router():
    return Router(
        gmail=GmailService(GmailSettings()),
        postgres=PostgresService(PostgresSettings()),
    )
