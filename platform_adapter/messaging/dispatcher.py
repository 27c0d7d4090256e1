"""
Broker Dispatcher: the responder side of the RPC protocol.

Subscribes to ``requests/#``, decodes each request, routes it by action to a
registered handler and publishes the handler's response on
``responses/{request_id}``. Messages are processed one at a time in the MQTT
network thread.
"""

from typing import Callable, Dict, Optional, Union

import paho.mqtt.client as mqtt

from ..config import BrokerConfig
from ..constants import Limits, ResponseErrorCode
from ..context.operation_context import OperationHandler
from ..exceptions import BaseError, PublishError
from ..utils.logger import get_logger
from .envelope import RequestEnvelope, ResponseEnvelope
from .mqtt_connection import create_mqtt_client, disconnect_mqtt_client
from .publisher import Publisher
from .topics import REQUEST_SUBSCRIPTION, parse_request_topic, response_topic

RequestHandler = Callable[[RequestEnvelope], ResponseEnvelope]


class BrokerDispatcher:
    """Routes inbound requests to handlers by action name."""

    def __init__(
        self,
        publisher: Publisher,
        client: Optional[mqtt.Client] = None,
        qos: int = Limits.DEFAULT_QOS,
    ):
        self.publisher = publisher
        self.client = client
        self.qos = qos
        self.logger = get_logger()
        self._handlers: Dict[str, RequestHandler] = {}
        self._operations = OperationHandler(self.logger)
        self._started = False

    @classmethod
    def connect(cls, config: BrokerConfig, publisher: Publisher) -> "BrokerDispatcher":
        """Open the consuming connection (client id ``{client_id}-consumer``)."""
        dispatcher = cls(publisher, qos=config.qos)
        dispatcher.client = create_mqtt_client(
            config, f"{config.client_id}-consumer", on_connected=dispatcher._on_connected
        )
        return dispatcher

    @property
    def actions(self):
        return sorted(self._handlers)

    def register_handler(self, action: str, handler: RequestHandler) -> None:
        """Register ``handler`` for ``action``. A second registration replaces the first."""
        if action in self._handlers:
            self.logger.warning(
                f"Replacing handler for action: {action}", extra={"action": action}
            )
        self._handlers[action] = handler
        self.logger.info(f"Registered handler for action: {action}", extra={"action": action})

    def start(self) -> None:
        """Subscribe to ``requests/#``."""
        if self.client is None:
            raise RuntimeError("Dispatcher has no broker connection")
        self.client.on_message = self._on_message
        self._started = True
        self._subscribe(self.client)

    def _subscribe(self, client: mqtt.Client) -> None:
        result, _ = client.subscribe(REQUEST_SUBSCRIPTION, qos=self.qos)
        if result != mqtt.MQTT_ERR_SUCCESS:
            self.logger.error(
                "Failed to subscribe",
                extra={"topic": REQUEST_SUBSCRIPTION, "rc": mqtt.error_string(result)},
            )
            return
        self.logger.info(f"Subscribed to: {REQUEST_SUBSCRIPTION}", extra={"qos": self.qos})

    def _on_connected(self, client: mqtt.Client) -> None:
        # Subscriptions do not survive a reconnect with a clean session
        if self._started:
            self._subscribe(client)

    def _on_message(self, client, userdata, msg) -> None:
        try:
            self.handle_message(msg.topic, msg.payload)
        except Exception:
            self.logger.exception("Unhandled error while dispatching", extra={"topic": msg.topic})

    def handle_message(self, topic: str, payload: Union[str, bytes]) -> None:
        """Process one inbound request message."""
        self.logger.debug(f"Received message on topic: {topic}", extra={"topic": topic})

        parsed_topic = parse_request_topic(topic)
        if parsed_topic is None:
            self.logger.warning(f"Invalid topic format: {topic}", extra={"topic": topic})
            return

        try:
            request = RequestEnvelope.from_json(payload)
        except ValueError as e:
            self.logger.warning(
                "Failed to parse request message", extra={"topic": topic, "error": str(e)}
            )
            # Empty request id: publish_response refuses it, so nothing is sent
            self.publish_error("", ResponseErrorCode.PARSE_ERROR, "Failed to parse request message")
            return

        if not request.platform and parsed_topic.platform:
            request.platform = parsed_topic.platform

        action = request.action or parsed_topic.action

        handler = self._handlers.get(action)
        if handler is None:
            self.logger.warning(
                f"No handler for action: {action}",
                extra={"action": action, "request_id": request.request_id},
            )
            self.publish_error(
                request.request_id, ResponseErrorCode.UNKNOWN_ACTION, f"Unknown action: {action}"
            )
            return

        with self._operations.operation(
            "dispatch",
            correlation_id=request.request_id or None,
            action=action,
            platform=request.platform,
            topic=topic,
        ):
            response = self._invoke(handler, request, action)
            self.publish_response(request.request_id, response)

    def _invoke(
        self, handler: RequestHandler, request: RequestEnvelope, action: str
    ) -> ResponseEnvelope:
        try:
            response = handler(request)
        except BaseError as e:
            return ResponseEnvelope.failure(e.response_code, e.message)
        except Exception as e:
            self.logger.exception(
                f"Handler for {action} failed: {type(e).__name__}",
                extra={"action": action, "error_type": type(e).__name__},
            )
            return ResponseEnvelope.failure(ResponseErrorCode.INTERNAL_ERROR, "Internal error")

        if response is None:
            self.logger.error(
                f"Handler for {action} returned no response", extra={"action": action}
            )
            return ResponseEnvelope.failure(ResponseErrorCode.INTERNAL_ERROR, "Internal error")
        return response

    def publish_response(self, request_id: str, response: ResponseEnvelope) -> bool:
        """
        Publish ``response`` on ``responses/{request_id}``.

        Returns:
            False when the request id is empty or publishing failed (logged)
        """
        if not request_id:
            self.logger.warning("Cannot publish response: missing request_id")
            return False

        response = response.model_copy(update={"request_id": request_id})
        topic = response_topic(request_id)
        try:
            self.publisher.publish_raw(topic, response.to_json())
        except PublishError as e:
            self.logger.error(
                "Failed to publish response",
                extra={"topic": topic, "request_id": request_id, "error_id": e.error_id},
            )
            return False

        self.logger.info(
            f"Published response to: {topic}",
            extra={"request_id": request_id, "success": response.success},
        )
        return True

    def publish_error(
        self, request_id: str, code: Union[ResponseErrorCode, str], message: str
    ) -> bool:
        return self.publish_response(
            request_id, ResponseEnvelope.failure(code, message, request_id=request_id)
        )

    def close(self) -> None:
        self._started = False
        if self.client is not None:
            disconnect_mqtt_client(self.client)
        self.logger.info("Disconnected dispatcher from broker")
