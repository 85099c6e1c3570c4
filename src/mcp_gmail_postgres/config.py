"""
Environment configuration for the MCP server.

Values are read from the process environment after loading a `.env` file
(if present). Every setting has the default documented in README.md;
only the Gmail credentials and the PostgreSQL password have none, and
their absence leaves the matching adapter unconfigured.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv
from psycopg.conninfo import make_conninfo

# Out-of-band redirect used by installed-app OAuth clients
OOB_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    """Read an integer variable, naming the variable when it is malformed."""
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class GmailSettings:
    """OAuth2 client settings for the Gmail API."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: str = OOB_REDIRECT_URI
    refresh_token: Optional[str] = None

    @property
    def has_client(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "GmailSettings":
        return cls(
            client_id=env.get("GMAIL_CLIENT_ID") or None,
            client_secret=env.get("GMAIL_CLIENT_SECRET") or None,
            redirect_uri=env.get("GMAIL_REDIRECT_URI") or OOB_REDIRECT_URI,
            refresh_token=env.get("GMAIL_REFRESH_TOKEN") or None,
        )


@dataclass(frozen=True)
class PostgresSettings:
    """Connection and pool settings for PostgreSQL."""
    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: Optional[str] = None
    ssl: bool = False
    pool_max_size: int = 10
    idle_timeout: float = 30.0
    connect_timeout: int = 2

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "PostgresSettings":
        return cls(
            host=env.get("POSTGRES_HOST") or "localhost",
            port=_get_int(env, "POSTGRES_PORT", 5432),
            database=env.get("POSTGRES_DATABASE") or "postgres",
            user=env.get("POSTGRES_USER") or "postgres",
            password=env.get("POSTGRES_PASSWORD") or None,
            ssl=env.get("POSTGRES_SSL") == "true",
            pool_max_size=_get_int(env, "POSTGRES_POOL_MAX", 10),
            idle_timeout=float(_get_int(env, "POSTGRES_IDLE_TIMEOUT", 30)),
            connect_timeout=_get_int(env, "POSTGRES_CONNECT_TIMEOUT", 2),
        )

    def conninfo(self) -> str:
        """
        Build the libpq connection string.

        SSL mode "require" encrypts the connection without verifying the
        server certificate.
        """
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            sslmode="require" if self.ssl else "disable",
            connect_timeout=self.connect_timeout,
        )


@dataclass(frozen=True)
class ServerSettings:
    """HTTP binding and logging settings."""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "ServerSettings":
        return cls(
            host=env.get("HOST") or "0.0.0.0",
            port=_get_int(env, "PORT", 3000),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )


@dataclass(frozen=True)
class Settings:
    """All settings for one server process."""
    gmail: GmailSettings = field(default_factory=GmailSettings)
    postgres: PostgresSettings = field(default_factory=PostgresSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (default: os.environ after loading .env)

        Returns:
            Settings instance

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        if env is None:
            load_dotenv()
            env = os.environ
        return cls(
            gmail=GmailSettings.from_env(env),
            postgres=PostgresSettings.from_env(env),
            server=ServerSettings.from_env(env),
        )
