"""Tests for process assembly and shutdown."""

import logging

import pytest

from platform_adapter.app import AdapterApplication
from platform_adapter.messaging.dispatcher import BrokerDispatcher
from platform_adapter.messaging.publisher import Publisher
from platform_adapter.messaging.topics import REQUEST_SUBSCRIPTION
from tests.fixtures.fakes import FakeMQTTClient


@pytest.fixture
def app(db_config, monkeypatch):
    monkeypatch.setenv("ENABLE_LOGS_QUEUE", "false")
    publisher_client = FakeMQTTClient()
    consumer_client = FakeMQTTClient()
    publisher = Publisher(publisher_client, publish_timeout=0.1)
    application = AdapterApplication(
        db_config=db_config,
        publisher=publisher,
        dispatcher=BrokerDispatcher(publisher, client=consumer_client),
    )
    application.publisher_client = publisher_client
    application.consumer_client = consumer_client
    yield application
    application.stop()
    logger = logging.getLogger("adapter.platform_adapter")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


def test_start_registers_handlers_and_subscribes(app):
    app.start()

    assert app.dispatcher.actions == ["api_request", "create_product"]
    assert app.consumer_client.subscriptions == [(REQUEST_SUBSCRIPTION, 1)]


def test_wait_times_out_until_stopped(app):
    assert app.wait(0) is False

    app.stop()

    assert app.wait(0) is True


def test_stop_disconnects_in_order_and_is_idempotent(app):
    app.start()

    app.stop()
    app.stop()

    assert app.consumer_client.disconnected
    assert app.consumer_client.loop_stopped
    assert app.publisher_client.disconnected


def test_tables_exist_after_startup(app):
    assert app.token_repository.find_by_shop_id("missing") is None
    assert app.field_mapping_repository.find_active("default", "product") == []
