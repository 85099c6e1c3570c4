"""Tests for environment configuration."""

import pytest

from mcp_gmail_postgres.config import OOB_REDIRECT_URI, Settings


class TestSettings:
    """Tests for Settings.from_env with an injected environment."""

    def test_defaults(self):
        """An empty environment yields the documented defaults."""
        settings = Settings.from_env({})

        assert settings.gmail.client_id is None
        assert settings.gmail.redirect_uri == OOB_REDIRECT_URI
        assert settings.gmail.has_client is False
        assert settings.postgres.host == "localhost"
        assert settings.postgres.port == 5432
        assert settings.postgres.database == "postgres"
        assert settings.postgres.user == "postgres"
        assert settings.postgres.password is None
        assert settings.postgres.ssl is False
        assert settings.postgres.pool_max_size == 10
        assert settings.postgres.idle_timeout == 30.0
        assert settings.postgres.connect_timeout == 2
        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 3000

    def test_values_from_env(self):
        """Every recognized variable is read."""
        settings = Settings.from_env({
            "GMAIL_CLIENT_ID": "cid",
            "GMAIL_CLIENT_SECRET": "csecret",
            "GMAIL_REDIRECT_URI": "http://localhost/callback",
            "GMAIL_REFRESH_TOKEN": "rtoken",
            "POSTGRES_HOST": "db",
            "POSTGRES_PORT": "6543",
            "POSTGRES_DATABASE": "crm",
            "POSTGRES_USER": "svc",
            "POSTGRES_PASSWORD": "pw",
            "POSTGRES_SSL": "true",
            "POSTGRES_POOL_MAX": "4",
            "PORT": "8080",
            "HOST": "127.0.0.1",
            "LOG_LEVEL": "debug",
        })

        assert settings.gmail.has_client is True
        assert settings.gmail.refresh_token == "rtoken"
        assert settings.gmail.redirect_uri == "http://localhost/callback"
        assert settings.postgres.port == 6543
        assert settings.postgres.ssl is True
        assert settings.postgres.pool_max_size == 4
        assert settings.server.port == 8080
        assert settings.server.host == "127.0.0.1"
        assert settings.server.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["1", "TRUE", "yes", ""])
    def test_ssl_only_for_literal_true(self, value):
        """Only the exact string 'true' enables TLS."""
        assert Settings.from_env({"POSTGRES_SSL": value}).postgres.ssl is False

    def test_malformed_port_names_variable(self):
        """Non-numeric ports fail with the variable name in the message."""
        with pytest.raises(ValueError, match="POSTGRES_PORT"):
            Settings.from_env({"POSTGRES_PORT": "five"})

    def test_conninfo(self):
        """The libpq string carries TLS mode and connect timeout."""
        settings = Settings.from_env({
            "POSTGRES_HOST": "db",
            "POSTGRES_PASSWORD": "pw",
            "POSTGRES_SSL": "true",
        })

        conninfo = settings.postgres.conninfo()

        assert "host=db" in conninfo
        assert "dbname=postgres" in conninfo
        assert "password=pw" in conninfo
        assert "sslmode=require" in conninfo
        assert "connect_timeout=2" in conninfo

    def test_conninfo_without_ssl(self):
        """TLS is disabled unless POSTGRES_SSL is 'true'."""
        settings = Settings.from_env({"POSTGRES_PASSWORD": "pw"})

        assert "sslmode=disable" in settings.postgres.conninfo()
