from typing import List, Optional

from sqlalchemy.orm import Session

from ..db.db_field_mapping_models import FieldMapping
from ..schemas.field_mapping_schema import FieldMappingRead
from ..utils.crud_helpers import create_record, delete_record, get_record, list_records
from .base_repository import BaseRepository


class FieldMappingRepository(BaseRepository[FieldMapping]):
    """Storage for mapping rules."""

    def __init__(self, session: Session):
        super().__init__(session, FieldMapping)

    def find_active(self, platform_id: str, entity_type: str) -> List[FieldMappingRead]:
        """
        Return the active rule set for one (platform, entity type) key.

        Rules come back in insertion order.
        """
        try:
            records = list_records(
                self.session,
                FieldMapping,
                filters={"platform_id": platform_id, "entity_type": entity_type, "is_active": True},
            )
            return [FieldMappingRead.model_validate(r) for r in records]
        except Exception as e:
            self._handle_db_error(
                e, "find_active", platform_id=platform_id, entity_type=entity_type
            )

    def list(
        self, platform_id: Optional[str] = None, entity_type: Optional[str] = None
    ) -> List[FieldMappingRead]:
        """List all rules (active or not), optionally filtered."""
        try:
            records = list_records(
                self.session,
                FieldMapping,
                filters={"platform_id": platform_id or None, "entity_type": entity_type or None},
            )
            return [FieldMappingRead.model_validate(r) for r in records]
        except Exception as e:
            self._handle_db_error(e, "list", platform_id=platform_id, entity_type=entity_type)

    def upsert(
        self,
        platform_id: str,
        entity_type: str,
        source_field: str,
        target_field: str,
        transform: Optional[str],
        is_active: bool,
    ) -> FieldMappingRead:
        """Insert a rule, or replace the one with the same source field."""
        try:
            record = get_record(
                self.session,
                FieldMapping,
                {
                    "platform_id": platform_id,
                    "entity_type": entity_type,
                    "source_field": source_field,
                },
            )
            if record is None:
                record = create_record(
                    self.session,
                    FieldMapping,
                    {
                        "platform_id": platform_id,
                        "entity_type": entity_type,
                        "source_field": source_field,
                        "target_field": target_field,
                        "transform": transform,
                        "is_active": is_active,
                    },
                )
            else:
                # Assign directly so a cleared transform is written as NULL
                record.target_field = target_field
                record.transform = transform
                record.is_active = is_active
                self.session.commit()

            self.logger.info(
                "Upserted field mapping",
                extra={
                    "platform_id": platform_id,
                    "entity_type": entity_type,
                    "source_field": source_field,
                    "target_field": target_field,
                },
            )
            return FieldMappingRead.model_validate(record)
        except Exception as e:
            self._handle_db_error(
                e,
                "upsert",
                platform_id=platform_id,
                entity_type=entity_type,
                source_field=source_field,
            )

    def delete_by_id(self, mapping_id: str) -> bool:
        """Delete a rule. Returns False when no rule has that id."""
        try:
            return delete_record(self.session, FieldMapping, mapping_id)
        except Exception as e:
            self._handle_db_error(e, "delete_by_id", entity_id=mapping_id)
