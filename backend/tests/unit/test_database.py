"""Tests for engine option selection."""

import pytest

from celengan.core.database import engine_options


@pytest.mark.unit
class TestEngineOptions:
    def test_postgres_gets_pool_and_server_settings(self):
        options = engine_options("postgresql+asyncpg://u:p@localhost/celengan")

        assert options["pool_pre_ping"] is True
        assert "pool_size" in options
        assert options["connect_args"]["server_settings"]["application_name"] == "celengan_api"

    def test_sqlite_gets_no_pool_options(self):
        options = engine_options("sqlite+aiosqlite:///./celengan.db")

        assert set(options) == {"echo"}
