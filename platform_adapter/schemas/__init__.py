"""Pydantic read/write schemas for the stored entities."""

from .field_mapping_schema import FieldMappingRead, FieldMappingUpsert
from .token_schema import TokenRead
from .trusted_service_schema import TrustedServiceRead

__all__ = ["FieldMappingRead", "FieldMappingUpsert", "TokenRead", "TrustedServiceRead"]
