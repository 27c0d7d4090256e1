from sqlalchemy import Column, DateTime, String, Text

from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class Token(Base, UUIDMixin, TimestampMixin):
    """OAuth token issued by the marketplace for one shop."""

    __tablename__ = "tokens"

    shop_id = Column(String(100), nullable=False, unique=True, index=True)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)
    token_type = Column(String(50), nullable=False, default="Bearer")
    expires_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Token(shop_id='{self.shop_id}', expires_at={self.expires_at})>"
