"""Outbound broker client used for RPC responses, requests and events."""

from typing import Optional, Union

import paho.mqtt.client as mqtt

from ..config import BrokerConfig
from ..constants import Limits, Timeouts
from ..exceptions import PublishError
from ..utils.logger import get_logger
from .envelope import EventMessage
from .mqtt_connection import create_mqtt_client, disconnect_mqtt_client
from .topics import event_topic


class Publisher:
    """
    Publishes payloads with QoS 1 and waits for the broker acknowledgement.

    The client is expected to be connected with its network loop running.
    """

    def __init__(
        self,
        client: mqtt.Client,
        qos: int = Limits.DEFAULT_QOS,
        publish_timeout: float = Timeouts.BROKER_PUBLISH,
    ):
        self.client = client
        self.qos = qos
        self.publish_timeout = publish_timeout
        self.logger = get_logger()

    @classmethod
    def connect(cls, config: BrokerConfig, client_id: Optional[str] = None) -> "Publisher":
        """Open a dedicated publishing connection (client id ``config.client_id``)."""
        client = create_mqtt_client(config, client_id or config.client_id)
        return cls(client, qos=config.qos, publish_timeout=config.publish_timeout)

    def publish_raw(self, topic: str, payload: Union[str, bytes]) -> None:
        """
        Publish ``payload`` on ``topic``.

        Raises:
            PublishError: If the message is rejected or not acknowledged in time
        """
        try:
            info = self.client.publish(topic, payload, qos=self.qos, retain=False)
        except ValueError as e:
            # wildcard characters or an invalid topic length
            raise PublishError(f"Failed to publish: {str(e)}", topic=topic, cause=e) from e

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(
                f"Failed to publish: {mqtt.error_string(info.rc)}", topic=topic, rc=info.rc
            )

        try:
            info.wait_for_publish(timeout=self.publish_timeout)
        except (RuntimeError, ValueError) as e:
            raise PublishError(f"Failed to publish: {str(e)}", topic=topic, cause=e) from e

        if not info.is_published():
            raise PublishError(
                "Publish timeout", topic=topic, timeout_seconds=self.publish_timeout
            )

        self.logger.debug("Published message", extra={"topic": topic})

    def publish_event(self, event: EventMessage) -> str:
        """Publish an event on ``orders/{event_type}`` and return the topic."""
        topic = event_topic(event.event_type)
        self.publish_raw(topic, event.to_json())
        self.logger.info(
            f"Published to {topic}",
            extra={"topic": topic, "platform": event.platform, "shop_id": event.shop_id},
        )
        return topic

    def close(self) -> None:
        disconnect_mqtt_client(self.client)
        self.logger.info("Disconnected from message broker")
