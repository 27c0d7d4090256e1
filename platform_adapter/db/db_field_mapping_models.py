from sqlalchemy import Boolean, Column, String, UniqueConstraint

from ..constants import DEFAULT_PLATFORM_ID
from .db_base import CreatedAtMixin, UUIDMixin
from .db_config import Base


class FieldMapping(Base, UUIDMixin, CreatedAtMixin):
    """One source path -> target path rule for a (platform, entity type) pair."""

    __tablename__ = "field_mappings"

    platform_id = Column(String(50), nullable=False, default=DEFAULT_PLATFORM_ID, index=True)
    entity_type = Column(String(50), nullable=False, index=True)
    source_field = Column(String(255), nullable=False)
    target_field = Column(String(255), nullable=False)
    transform = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint(
            "platform_id", "entity_type", "source_field", name="uq_field_mapping_source"
        ),
    )

    def __repr__(self):
        return (
            f"<FieldMapping(platform_id='{self.platform_id}', entity_type='{self.entity_type}', "
            f"source_field='{self.source_field}', target_field='{self.target_field}')>"
        )
