"""
Webhook ingestion.

Signed marketplace webhooks are verified, their payload is mapped to the
platform schema and the result is published on ``orders/{event_type}``.
"""

import hashlib
import hmac
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from ..constants import DEFAULT_PLATFORM_ID
from ..context.operation_context import operation
from ..exceptions import ErrorCode, MappingError, UnauthorizedError, ValidationError
from ..mapping.field_mapper import FieldMapper
from ..messaging.envelope import EventMessage
from ..messaging.publisher import Publisher
from ..utils.json_utils import loads_object
from ..utils.logger import get_logger


class WebhookResponse(BaseModel):
    success: bool
    message: str


def _string_field(data: Dict[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def infer_entity_type(event_type: str, data: Dict[str, Any]) -> str:
    """
    ``data.entity_type`` when present, else the event type's prefix.

    ``"order.created"`` and ``"order_created"`` both give ``"order"``.
    """
    explicit = _string_field(data, "entity_type").strip()
    if explicit:
        return explicit.lower()

    normalized = event_type.strip().lower()
    for separator in (".", "_"):
        if separator in normalized:
            return normalized.split(separator, 1)[0]
    return normalized


class WebhookService:
    """Verifies and republishes marketplace webhooks."""

    def __init__(self, secret: str, publisher: Publisher, mapper: Optional[FieldMapper] = None):
        self.secret = secret
        self.publisher = publisher
        self.mapper = mapper
        self.logger = get_logger()

    def verify_signature(self, payload: bytes, signature: str) -> bool:
        """HMAC-SHA256 hex digest check. Always false without a configured secret."""
        if not self.secret:
            return False
        expected = hmac.new(self.secret.encode(), payload, hashlib.sha256).hexdigest()
        return hmac.compare_digest(signature.encode(), expected.encode())

    def process_webhook(self, event_type: str, data: Dict[str, Any]) -> str:
        """
        Map ``data`` and publish it as an event.

        Returns:
            The topic the event was published on

        Raises:
            ValidationError: If the payload has neither store_id nor shop_id
            PublishError: If the event cannot be published
        """
        platform = _string_field(data, "platform", DEFAULT_PLATFORM_ID)
        platform_id = platform.strip().lower() or DEFAULT_PLATFORM_ID

        shop_id = _string_field(data, "store_id") or _string_field(data, "shop_id")
        if not shop_id:
            raise ValidationError(
                "shop_id is required in payload",
                field="shop_id",
                error_code=ErrorCode.MISSING_REQUIRED,
            )

        mapped = data
        entity_type = infer_entity_type(event_type, data)
        if self.mapper is not None and entity_type:
            try:
                mapped = self.mapper.transform(platform_id, entity_type, data)
            except MappingError as e:
                self.logger.warning(
                    "Mapping failed, using raw payload",
                    extra={
                        "platform_id": platform_id,
                        "entity_type": entity_type,
                        "error_id": e.error_id,
                    },
                )

        event = EventMessage(event_type=event_type, platform=platform, shop_id=shop_id, data=mapped)
        return self.publisher.publish_event(event)

    @operation()
    def ingest(
        self, raw_body: Union[str, bytes], signature: str, event_type: str
    ) -> WebhookResponse:
        """
        Handle one webhook delivery.

        Raises:
            UnauthorizedError: On a missing or invalid signature
            ValidationError: On a missing event type or a malformed body
            PublishError: If the event cannot be published
        """
        if not signature:
            raise UnauthorizedError(
                "X-Webhook-Signature header is required", reason="missing_signature"
            )
        if not event_type:
            raise ValidationError(
                "X-Webhook-Event header is required",
                field="event_type",
                error_code=ErrorCode.MISSING_REQUIRED,
                reason="missing_event_type",
            )

        body = raw_body.encode() if isinstance(raw_body, str) else raw_body
        if not self.verify_signature(body, signature):
            raise UnauthorizedError(
                "Webhook signature verification failed", reason="invalid_signature"
            )

        try:
            payload = loads_object(body)
        except ValueError as e:
            raise ValidationError(
                "Failed to parse request body",
                error_code=ErrorCode.INVALID_FORMAT,
                cause=e,
                reason="invalid_json",
            ) from e

        data = payload.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError(
                "Failed to parse request body",
                field="data",
                error_code=ErrorCode.INVALID_FORMAT,
                reason="invalid_json",
            )

        topic = self.process_webhook(event_type, data)
        self.logger.info("Webhook received and published", extra={"topic": topic})
        return WebhookResponse(success=True, message="Webhook received and published")
