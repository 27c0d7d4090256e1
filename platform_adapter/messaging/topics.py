"""Topic layout on the broker."""

from typing import NamedTuple, Optional

from ..constants import TopicPrefix

REQUEST_SUBSCRIPTION = f"{TopicPrefix.REQUESTS.value}/#"


class RequestTopic(NamedTuple):
    action: str
    platform: str


def request_topic(action: str, platform: str = "") -> str:
    """``requests/{platform}/{action}`` when a platform is given, else ``requests/{action}``."""
    if platform:
        return f"{TopicPrefix.REQUESTS.value}/{platform}/{action}"
    return f"{TopicPrefix.REQUESTS.value}/{action}"


def response_topic(request_id: str) -> str:
    return f"{TopicPrefix.RESPONSES.value}/{request_id}"


def event_topic(event_type: str) -> str:
    return f"{TopicPrefix.ORDERS.value}/{event_type}"


def parse_request_topic(topic: str) -> Optional[RequestTopic]:
    """
    Split a request topic into its action and platform parts.

    The action is the last segment. The platform is the second segment when
    the topic has at least three segments under ``requests``, else empty.

    Returns:
        None when the topic has fewer than two segments
    """
    parts = topic.split("/")
    if len(parts) < 2:
        return None

    platform = ""
    if len(parts) >= 3 and parts[0] == TopicPrefix.REQUESTS.value:
        platform = parts[1]
    return RequestTopic(action=parts[-1], platform=platform)
