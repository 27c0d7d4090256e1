"""
Unit tests for the Broker Dispatcher.

Responses are read back from the fake client behind the publisher.
"""

import json

import paho.mqtt.client as mqtt
import pytest

from platform_adapter.exceptions import ForbiddenError, get_correlation_id
from platform_adapter.messaging.dispatcher import BrokerDispatcher
from platform_adapter.messaging.envelope import RequestEnvelope, ResponseEnvelope
from tests.fixtures.fakes import FakeMQTTClient


@pytest.fixture
def consumer_client():
    return FakeMQTTClient()


@pytest.fixture
def dispatcher(publisher, consumer_client):
    return BrokerDispatcher(publisher, client=consumer_client)


def _responses(mqtt_client):
    return [(topic, json.loads(payload)) for topic, payload, _ in mqtt_client.published]


def _request(**fields):
    body = {"request_id": "req-1", "api_key": "key", "shop_id": "shop_1"}
    body.update(fields)
    return json.dumps(body)


class TestRouting:
    def test_action_and_platform_from_topic(self, dispatcher, mqtt_client):
        seen = []

        def handler(request):
            seen.append(request)
            return ResponseEnvelope.ok({"ok": True})

        dispatcher.register_handler("get_products", handler)
        dispatcher.handle_message("requests/shopee/get_products", _request())

        assert seen[0].platform == "shopee"
        assert _responses(mqtt_client) == [
            (
                "responses/req-1",
                {"request_id": "req-1", "success": True, "data": {"ok": True}, "error": None},
            )
        ]

    def test_body_fields_win_over_topic(self, dispatcher):
        seen = []
        dispatcher.register_handler(
            "api_request", lambda r: seen.append(r) or ResponseEnvelope.ok(None)
        )

        dispatcher.handle_message(
            "requests/shopee/get_products", _request(action="api_request", platform="lazada")
        )

        assert seen[0].platform == "lazada"

    def test_two_segment_topic_has_no_platform(self, dispatcher):
        seen = []
        dispatcher.register_handler(
            "api_request", lambda r: seen.append(r) or ResponseEnvelope.ok(1)
        )

        dispatcher.handle_message("requests/api_request", _request())

        assert seen[0].platform == ""

    def test_response_request_id_is_overwritten(self, dispatcher, mqtt_client):
        dispatcher.register_handler(
            "x", lambda r: ResponseEnvelope.ok(1, request_id="something-else")
        )

        dispatcher.handle_message("requests/x", _request())

        assert _responses(mqtt_client)[0][1]["request_id"] == "req-1"

    def test_last_registration_wins(self, dispatcher, mqtt_client):
        dispatcher.register_handler("x", lambda r: ResponseEnvelope.ok("first"))
        dispatcher.register_handler("x", lambda r: ResponseEnvelope.ok("second"))

        dispatcher.handle_message("requests/x", _request())

        assert _responses(mqtt_client)[0][1]["data"] == "second"
        assert dispatcher.actions == ["x"]

    def test_request_id_is_correlation_id_during_handler(self, dispatcher):
        seen = []
        dispatcher.register_handler(
            "x", lambda r: seen.append(get_correlation_id()) or ResponseEnvelope.ok(1)
        )

        dispatcher.handle_message("requests/x", _request())

        assert seen == ["req-1"]
        assert get_correlation_id() is None


class TestProtocolErrors:
    def test_unknown_action(self, dispatcher, mqtt_client):
        dispatcher.handle_message("requests/shopee/get_products", _request())

        topic, body = _responses(mqtt_client)[0]
        assert topic == "responses/req-1"
        assert body["success"] is False
        assert body["error"] == {
            "code": "unknown_action",
            "message": "Unknown action: get_products",
        }

    def test_parse_error_is_dropped(self, dispatcher, mqtt_client):
        dispatcher.handle_message("requests/x", b"not json")

        assert mqtt_client.published == []

    def test_short_topic_is_dropped(self, dispatcher, mqtt_client):
        dispatcher.register_handler("requests", lambda r: ResponseEnvelope.ok(1))

        dispatcher.handle_message("requests", _request())

        assert mqtt_client.published == []

    def test_missing_request_id_gets_no_response(self, dispatcher, mqtt_client):
        dispatcher.register_handler("x", lambda r: ResponseEnvelope.ok(1))

        dispatcher.handle_message("requests/x", json.dumps({"action": "x"}))

        assert mqtt_client.published == []


class TestHandlerFailures:
    def test_base_error_maps_to_its_code(self, dispatcher, mqtt_client):
        def handler(request):
            raise ForbiddenError("nope")

        dispatcher.register_handler("x", handler)
        dispatcher.handle_message("requests/x", _request())

        assert _responses(mqtt_client)[0][1]["error"] == {"code": "forbidden", "message": "nope"}

    def test_unexpected_exception_is_internal_error(self, dispatcher, mqtt_client):
        def handler(request):
            raise KeyError("boom")

        dispatcher.register_handler("x", handler)
        dispatcher.handle_message("requests/x", _request())

        assert _responses(mqtt_client)[0][1]["error"] == {
            "code": "internal_error",
            "message": "Internal error",
        }

    def test_none_response_is_internal_error(self, dispatcher, mqtt_client):
        dispatcher.register_handler("x", lambda r: None)
        dispatcher.handle_message("requests/x", _request())

        assert _responses(mqtt_client)[0][1]["error"]["code"] == "internal_error"


class TestPublishResponse:
    def test_refuses_empty_request_id(self, dispatcher, mqtt_client):
        assert dispatcher.publish_response("", ResponseEnvelope.ok(1)) is False
        assert mqtt_client.published == []

    def test_publish_failure_is_swallowed(self, dispatcher, mqtt_client):
        mqtt_client.publish_rc = mqtt.MQTT_ERR_NO_CONN

        assert dispatcher.publish_response("r", ResponseEnvelope.ok(1)) is False

    def test_wildcard_request_id_is_dropped(self, dispatcher, mqtt_client):
        dispatcher.register_handler("api_request", lambda r: ResponseEnvelope.ok(1))

        dispatcher.handle_message("requests/api_request", _request(request_id="a+b"))

        assert mqtt_client.published == []

    def test_publish_error(self, dispatcher, mqtt_client):
        assert dispatcher.publish_error("r", "bad_request", "missing") is True
        assert _responses(mqtt_client)[0][1]["error"]["code"] == "bad_request"


class TestSubscription:
    def test_start_subscribes(self, dispatcher, consumer_client):
        dispatcher.start()

        assert consumer_client.subscriptions == [("requests/#", 1)]
        assert consumer_client.on_message is not None

    def test_messages_flow_through_on_message(self, dispatcher, consumer_client, mqtt_client):
        dispatcher.register_handler("x", lambda r: ResponseEnvelope.ok(1))
        dispatcher.start()

        consumer_client.deliver("requests/x", _request())

        assert mqtt_client.published_topics() == ["responses/req-1"]

    def test_resubscribes_on_reconnect_once_started(self, dispatcher, consumer_client):
        dispatcher._on_connected(consumer_client)
        assert consumer_client.subscriptions == []

        dispatcher.start()
        dispatcher._on_connected(consumer_client)
        assert consumer_client.subscriptions == [("requests/#", 1), ("requests/#", 1)]

    def test_start_without_connection(self, publisher):
        with pytest.raises(RuntimeError):
            BrokerDispatcher(publisher).start()

    def test_close(self, dispatcher, consumer_client):
        dispatcher.close()
        assert consumer_client.disconnected


def test_handler_receives_envelope(dispatcher):
    seen = []
    dispatcher.register_handler("x", lambda r: seen.append(r) or ResponseEnvelope.ok(1))

    dispatcher.handle_message("requests/x", _request(params={"path": "/p"}))

    assert isinstance(seen[0], RequestEnvelope)
    assert seen[0].params == {"path": "/p"}
