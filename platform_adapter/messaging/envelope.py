"""
Wire shapes exchanged over the broker.

RPC requests and responses are correlated only by ``request_id``; events
published from webhooks carry no correlation at all.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import ResponseErrorCode, TopicPrefix
from ..utils.json_utils import dumps, loads_object


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class RequestEnvelope(BaseModel):
    """RPC request as published on ``requests/...``."""

    model_config = ConfigDict(extra="ignore")

    request_id: str = ""
    api_key: str = ""
    platform: str = ""
    shop_id: str = ""
    action: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("request_id", "api_key", "platform", "shop_id", "action", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("params", mode="before")
    @classmethod
    def null_params_as_empty(cls, v):
        return {} if v is None else v

    @classmethod
    def from_json(cls, payload: Union[str, bytes, bytearray]) -> "RequestEnvelope":
        """
        Decode a request body.

        Raises:
            ValueError: If the body is not a JSON object of the right shape
                (pydantic's ValidationError is a ValueError)
        """
        return cls.model_validate(loads_object(payload))

    def to_json(self) -> str:
        return dumps(self.model_dump(mode="json"))


class ErrorDetail(BaseModel):
    code: str
    message: str


class ResponseEnvelope(BaseModel):
    """RPC response published on ``responses/{request_id}``."""

    request_id: str = ""
    success: bool
    data: Any = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def ok(cls, data: Any, request_id: str = "") -> "ResponseEnvelope":
        return cls(request_id=request_id, success=True, data=data, error=None)

    @classmethod
    def failure(
        cls,
        code: Union[ResponseErrorCode, str],
        message: str,
        request_id: str = "",
    ) -> "ResponseEnvelope":
        code_value = code.value if isinstance(code, ResponseErrorCode) else code
        return cls(
            request_id=request_id,
            success=False,
            data=None,
            error=ErrorDetail(code=code_value, message=message),
        )

    @classmethod
    def from_json(cls, payload: Union[str, bytes, bytearray]) -> "ResponseEnvelope":
        return cls.model_validate(loads_object(payload))

    def to_json(self) -> str:
        return dumps(self.model_dump(mode="json"))


class EventMessage(BaseModel):
    """Event published on ``orders/{event_type}``."""

    event_type: str
    timestamp: str = Field(default_factory=_utc_timestamp, description="RFC 3339, UTC")
    platform: str
    shop_id: str
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return dumps(self.model_dump(mode="json"))


class PendingRequest(BaseModel):
    """Receipt returned when a request is submitted without waiting."""

    request_id: str
    status: str = "pending"
    response_topic: str

    @classmethod
    def for_request(cls, request_id: str) -> "PendingRequest":
        return cls(
            request_id=request_id,
            response_topic=f"{TopicPrefix.RESPONSES.value}/{request_id}",
        )
