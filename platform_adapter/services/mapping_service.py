"""
Management operations for mapping rules.

Every mutation clears the Field Mapper cache so the next lookup sees it.
"""

from typing import List, Optional

from ..constants import DEFAULT_PLATFORM_ID
from ..context.operation_context import operation
from ..exceptions import ErrorCode, ValidationError, not_found
from ..mapping.field_mapper import FieldMapper
from ..mapping.transforms import is_known_transform
from ..repositories.field_mapping_repository import FieldMappingRepository
from ..schemas.field_mapping_schema import FieldMappingRead, FieldMappingUpsert
from ..utils.logger import get_logger


class MappingService:
    """List, upsert and delete mapping rules."""

    def __init__(self, repository: FieldMappingRepository, mapper: FieldMapper):
        self.repository = repository
        self.mapper = mapper
        self.logger = get_logger()

    def list_mappings(
        self, platform_id: Optional[str] = None, entity_type: Optional[str] = None
    ) -> List[FieldMappingRead]:
        return self.repository.list(
            platform_id=(platform_id or "").strip() or None,
            entity_type=(entity_type or "").strip() or None,
        )

    @operation()
    def upsert_mapping(self, data: FieldMappingUpsert) -> FieldMappingRead:
        """
        Create or replace the rule for (platform, entity type, source field).

        Platform and entity type are lower-cased; a blank platform means
        ``"default"``. An empty transform is stored as no transform.

        Raises:
            ValidationError: If entity_type, source_field or target_field is blank
        """
        platform_id = data.platform_id.strip().lower() or DEFAULT_PLATFORM_ID
        entity_type = data.entity_type.strip().lower()
        source_field = data.source_field.strip()
        target_field = data.target_field.strip()
        transform = (data.transform or "").strip() or None

        if not entity_type or not source_field or not target_field:
            raise ValidationError(
                "platform_id/entity_type/source_field/target_field are required",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="mapping",
            )

        if transform and not is_known_transform(transform):
            # Unknown names behave as identity when applied
            self.logger.warning(
                f"Unknown transform '{transform}' stored for mapping",
                extra={"platform_id": platform_id, "entity_type": entity_type},
            )

        mapping = self.repository.upsert(
            platform_id=platform_id,
            entity_type=entity_type,
            source_field=source_field,
            target_field=target_field,
            transform=transform,
            is_active=True if data.is_active is None else data.is_active,
        )
        self.mapper.clear_cache()
        return mapping

    @operation()
    def delete_mapping(self, mapping_id: str) -> None:
        """
        Raises:
            ValidationError: If ``mapping_id`` is blank
            RepositoryError: If no rule has that id
        """
        mapping_id = (mapping_id or "").strip()
        if not mapping_id:
            raise ValidationError(
                "id is required", field="id", error_code=ErrorCode.MISSING_REQUIRED
            )

        if not self.repository.delete_by_id(mapping_id):
            raise not_found("FieldMapping", mapping_id=mapping_id)
        self.mapper.clear_cache()
