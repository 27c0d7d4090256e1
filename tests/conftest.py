"""
Test fixtures for the adapter test suite.

Provides the in-memory database, global state resets and fixtures around the
simple fakes in ``tests.fixtures.fakes``.
"""

import pytest
from sqlalchemy.orm import Session

from platform_adapter.config import reset_config
from platform_adapter.db import DatabaseConfig, DatabaseManager, import_all_models
from platform_adapter.db.db_config import Base
from platform_adapter.exceptions import clear_correlation_id
from platform_adapter.messaging.publisher import Publisher
from platform_adapter.utils.logger import reset_logging
from tests.fixtures.factories import ALL_FACTORIES
from tests.fixtures.fakes import FakeMQTTClient, FakeRuleStore


@pytest.fixture(autouse=True)
def reset_global_state():
    """Every test starts with fresh config, logger and correlation id."""
    reset_config()
    reset_logging()
    clear_correlation_id()
    yield
    reset_config()
    reset_logging()
    clear_correlation_id()


# ==================== DATABASE ====================


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    import_all_models()
    manager = DatabaseManager(db_config)
    yield manager
    manager.close()


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Fresh tables and session for each test.

    Factories are bound to the same session.
    """
    Base.metadata.create_all(db_manager.engine)
    session = db_manager.get_session()
    for factory_class in ALL_FACTORIES:
        factory_class._meta.sqlalchemy_session = session

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


# ==================== FAKE FIXTURES ====================


@pytest.fixture
def rule_store() -> FakeRuleStore:
    return FakeRuleStore()


@pytest.fixture
def mqtt_client() -> FakeMQTTClient:
    return FakeMQTTClient()


@pytest.fixture
def publisher(mqtt_client) -> Publisher:
    return Publisher(mqtt_client, qos=1, publish_timeout=0.5)
