"""
Request Client: the caller side of the RPC protocol.

``submit`` publishes a request and returns a pending receipt immediately;
``call`` also waits for the correlated response on ``responses/{request_id}``.
"""

import threading
import uuid
from typing import Any, Dict, Optional, Set

import paho.mqtt.client as mqtt

from ..config import BrokerConfig
from ..constants import Limits, Timeouts
from ..exceptions import PublishError, RequestTimeoutError
from ..utils.logger import get_logger
from .envelope import PendingRequest, RequestEnvelope, ResponseEnvelope
from .mqtt_connection import create_mqtt_client, disconnect_mqtt_client
from .publisher import Publisher
from .topics import request_topic, response_topic


class _PendingCall:
    def __init__(self):
        self.event = threading.Event()
        self.response: Optional[ResponseEnvelope] = None


class RequestClient:
    """Submits RPC requests onto the broker."""

    def __init__(
        self,
        publisher: Publisher,
        client: Optional[mqtt.Client] = None,
        api_key: str = "",
        qos: int = Limits.DEFAULT_QOS,
        subscribe_timeout: float = Timeouts.BROKER_PUBLISH,
    ):
        self.publisher = publisher
        self.client = client
        self.api_key = api_key
        self.qos = qos
        self.subscribe_timeout = subscribe_timeout
        self.logger = get_logger()

        self._acked_mids: Set[int] = set()
        self._expired_mids: Set[int] = set()
        self._ack_condition = threading.Condition()
        if client is not None:
            client.on_subscribe = self._on_subscribe

    @classmethod
    def connect(
        cls, config: BrokerConfig, publisher: Publisher, api_key: str = ""
    ) -> "RequestClient":
        """Open a connection for receiving responses (client id ``{client_id}-requester``)."""
        request_client = cls(
            publisher, api_key=api_key, qos=config.qos, subscribe_timeout=config.publish_timeout
        )
        request_client.client = create_mqtt_client(
            config, f"{config.client_id}-requester", on_connected=request_client._on_connected
        )
        request_client.client.on_subscribe = request_client._on_subscribe
        return request_client

    def build_request(
        self,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        shop_id: str = "",
        platform: str = "",
        request_id: Optional[str] = None,
    ) -> RequestEnvelope:
        return RequestEnvelope(
            request_id=request_id or str(uuid.uuid4()),
            api_key=self.api_key,
            platform=platform,
            shop_id=shop_id,
            action=action,
            params=dict(params or {}),
        )

    def _publish_request(self, request: RequestEnvelope) -> str:
        topic = request_topic(request.action, request.platform)
        self.publisher.publish_raw(topic, request.to_json())
        self.logger.info(
            f"Published request {request.request_id} to {topic}",
            extra={"request_id": request.request_id, "action": request.action},
        )
        return topic

    def submit(
        self,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        shop_id: str = "",
        platform: str = "",
        request_id: Optional[str] = None,
    ) -> PendingRequest:
        """
        Publish a request without waiting for its response.

        Raises:
            PublishError: If the request cannot be published
        """
        request = self.build_request(action, params, shop_id, platform, request_id)
        self._publish_request(request)
        return PendingRequest.for_request(request.request_id)

    def call(
        self,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        shop_id: str = "",
        platform: str = "",
        request_id: Optional[str] = None,
        timeout: float = Timeouts.RPC_RESPONSE,
    ) -> ResponseEnvelope:
        """
        Publish a request and block until its response arrives.

        Raises:
            PublishError: If subscribing or publishing fails
            RequestTimeoutError: If no response arrives within ``timeout`` seconds
        """
        if self.client is None:
            raise RuntimeError("Request client has no broker connection for responses")

        request = self.build_request(action, params, shop_id, platform, request_id)
        topic = response_topic(request.request_id)
        pending = _PendingCall()

        def _on_response(client, userdata, msg):
            try:
                pending.response = ResponseEnvelope.from_json(msg.payload)
            except ValueError as e:
                self.logger.warning(
                    "Ignoring malformed response",
                    extra={"topic": msg.topic, "error": str(e)},
                )
                return
            pending.event.set()

        self.client.message_callback_add(topic, _on_response)
        try:
            self._subscribe_and_wait(topic)
            self._publish_request(request)

            if not pending.event.wait(timeout):
                raise RequestTimeoutError(
                    f"No response for {action} within {timeout}s",
                    request_id=request.request_id,
                    action=action,
                )
            return pending.response
        finally:
            self.client.unsubscribe(topic)
            self.client.message_callback_remove(topic)

    def _on_connected(self, client: mqtt.Client) -> None:
        # Acknowledgements still owed from the old session will never arrive
        with self._ack_condition:
            self._expired_mids.clear()

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties):
        with self._ack_condition:
            if mid in self._expired_mids:
                # acknowledgement for a subscribe that already timed out
                self._expired_mids.discard(mid)
                return
            self._acked_mids.add(mid)
            self._ack_condition.notify_all()

    def _subscribe_and_wait(self, topic: str) -> None:
        result, mid = self.client.subscribe(topic, qos=self.qos)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(f"Failed to subscribe: {mqtt.error_string(result)}", topic=topic)

        with self._ack_condition:
            acked = self._ack_condition.wait_for(
                lambda: mid in self._acked_mids, timeout=self.subscribe_timeout
            )
            self._acked_mids.discard(mid)
            if not acked:
                self._expired_mids.add(mid)
        if not acked:
            raise PublishError("Subscribe timeout", topic=topic)

    def close(self) -> None:
        if self.client is not None:
            disconnect_mqtt_client(self.client)
