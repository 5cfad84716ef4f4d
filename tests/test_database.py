"""Tests for engine configuration shared by the app and migrations."""

from accounts.database import engine_options


class TestEngineOptions:
    def test_sqlite_allows_cross_thread_sessions(self):
        options = engine_options("sqlite:///./accounts.db")
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_pre_ping" not in options

    def test_server_database_pings_pooled_connections(self):
        options = engine_options("postgresql://accounts@localhost/accounts", echo=True)
        assert options == {"echo": True, "pool_pre_ping": True}
