from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..constants import Limits


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TokenRead(BaseModel):
    """OAuth token for one shop."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    shop_id: str
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("expires_at", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v):
        return _as_utc(v)

    @field_validator("token_type", mode="before")
    @classmethod
    def default_token_type(cls, v):
        return v or "Bearer"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def should_refresh(
        self,
        margin_seconds: int = Limits.TOKEN_REFRESH_MARGIN_SECONDS,
        now: Optional[datetime] = None,
    ) -> bool:
        """True when the token expires within ``margin_seconds``."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now + timedelta(seconds=margin_seconds) > self.expires_at
