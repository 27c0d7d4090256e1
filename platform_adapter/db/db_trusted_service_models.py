from sqlalchemy import Boolean, Column, String

from .db_base import JSON, CreatedAtMixin, UUIDMixin
from .db_config import Base


class TrustedService(Base, UUIDMixin, CreatedAtMixin):
    """A caller identified by an API key with an allow-list of actions."""

    __tablename__ = "trusted_services"

    api_key = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    allowed_actions = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<TrustedService(name='{self.name}', is_active={self.is_active})>"
