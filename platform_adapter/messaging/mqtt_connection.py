"""
MQTT client construction.

Every adapter connection (publisher, dispatcher, request client) is a paho
client with its own network thread started by ``loop_start()``.
"""

import threading
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from ..config import BrokerConfig
from ..exceptions import ErrorCode, ExternalServiceError
from ..utils.logger import get_logger

BROKER_SERVICE_NAME = "mqtt_broker"

OnConnected = Callable[[mqtt.Client], None]


def create_mqtt_client(
    config: BrokerConfig,
    client_id: str,
    on_connected: Optional[OnConnected] = None,
    connect: bool = True,
) -> mqtt.Client:
    """
    Build a paho client for ``config`` and, by default, connect it.

    Args:
        config: Broker settings
        client_id: MQTT client id for this connection
        on_connected: Called from the network thread after every successful
            (re)connect, e.g. to restore subscriptions
        connect: Connect and start the network loop before returning

    Raises:
        ExternalServiceError: If the broker refuses the connection or does not
            answer within ``config.connect_timeout``
    """
    logger = get_logger()
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)

    if config.username:
        client.username_pw_set(config.username, config.password or None)
    if config.use_tls:
        client.tls_set()
    client.reconnect_delay_set(min_delay=1, max_delay=5)

    connected = threading.Event()
    refused: dict = {}

    def _on_connect(mqtt_client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            refused["reason"] = str(reason_code)
            logger.error(
                "Broker refused connection",
                extra={"client_id": client_id, "reason_code": str(reason_code)},
            )
            connected.set()
            return

        refused.pop("reason", None)
        logger.info(
            "Connected to message broker",
            extra={"client_id": client_id, "host": config.host, "port": config.port},
        )
        if on_connected is not None:
            on_connected(mqtt_client)
        connected.set()

    def _on_disconnect(mqtt_client, userdata, disconnect_flags, reason_code, properties):
        logger.warning(
            "Broker connection lost",
            extra={"client_id": client_id, "reason_code": str(reason_code)},
        )

    client.on_connect = _on_connect
    client.on_disconnect = _on_disconnect

    if not connect:
        return client

    try:
        client.connect(config.host, config.port, keepalive=config.keepalive)
    except (OSError, ValueError) as e:
        raise ExternalServiceError(
            f"Failed to connect to broker at {config.url}: {str(e)}",
            service_name=BROKER_SERVICE_NAME,
            error_code=ErrorCode.CONNECTION_ERROR,
            cause=e,
            client_id=client_id,
        ) from e

    client.loop_start()

    if not connected.wait(config.connect_timeout):
        client.loop_stop()
        raise ExternalServiceError(
            "Broker connection timeout",
            service_name=BROKER_SERVICE_NAME,
            error_code=ErrorCode.TIMEOUT_ERROR,
            client_id=client_id,
            timeout_seconds=config.connect_timeout,
        )

    if "reason" in refused:
        client.loop_stop()
        raise ExternalServiceError(
            f"Broker refused connection: {refused['reason']}",
            service_name=BROKER_SERVICE_NAME,
            error_code=ErrorCode.CONNECTION_ERROR,
            client_id=client_id,
        )

    return client


def disconnect_mqtt_client(client: mqtt.Client) -> None:
    """Disconnect and stop the network thread."""
    client.disconnect()
    client.loop_stop()
