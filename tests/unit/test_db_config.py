"""Unit tests for database configuration and management."""

import pytest

from platform_adapter.db import DatabaseConfig, DatabaseManager, close_db, get_db_manager
from platform_adapter.db.db_config import (
    get_database_config,
    initialize_db,
    set_db_manager,
)
from platform_adapter.exceptions import ServiceError, ValidationError


class TestDatabaseConfig:
    def test_sqlite_connection_string(self):
        config = DatabaseConfig(db_type="sqlite", database="adapter.db")
        assert config.get_connection_string() == "sqlite:///adapter.db"

    def test_postgres_connection_string(self):
        config = DatabaseConfig(
            database="adapter_db", host="db", port="5433", username="u", password="p"
        )
        assert config.get_connection_string() == "postgresql://u:p@db:5433/adapter_db"

    def test_postgres_missing_parameters(self):
        with pytest.raises(ValidationError):
            DatabaseConfig(database="adapter_db").get_connection_string()

    def test_unsupported_type(self):
        with pytest.raises(ValidationError):
            DatabaseConfig(db_type="oracle", database="x").get_connection_string()

    def test_repr_masks_password(self):
        config = DatabaseConfig(database="x", password="hunter2")
        assert "hunter2" not in repr(config)


class TestEnvironmentSelection:
    def test_sqlite(self, monkeypatch):
        monkeypatch.setenv("DB_TYPE", "sqlite")
        monkeypatch.delenv("DEV_DB_PATH", raising=False)

        config = get_database_config()

        assert config.db_type == "sqlite"
        assert config.database == ":memory:"
        assert config.development_mode is True

    def test_postgres(self, monkeypatch):
        monkeypatch.delenv("DB_TYPE", raising=False)
        monkeypatch.setenv("DB_HOST", "pg.internal")
        monkeypatch.setenv("DB_POOL_SIZE", "8")

        config = get_database_config()

        assert config.db_type == "postgres"
        assert config.host == "pg.internal"
        assert config.pool_size == 8


class TestGlobalManager:
    def test_not_initialized(self):
        set_db_manager(None)
        with pytest.raises(ServiceError):
            get_db_manager()

    def test_initialize_and_close(self):
        manager = initialize_db(DatabaseConfig(db_type="sqlite", database=":memory:"))
        try:
            assert get_db_manager() is manager
        finally:
            close_db()
        with pytest.raises(ServiceError):
            get_db_manager()


def test_drop_tables_requires_development_mode():
    manager = DatabaseManager(
        DatabaseConfig(db_type="sqlite", database=":memory:", development_mode=False)
    )
    try:
        with pytest.raises(ServiceError):
            manager.drop_tables()
    finally:
        manager.close()
