"""Repositories over the adapter's SQLAlchemy models."""

from .field_mapping_repository import FieldMappingRepository
from .token_repository import TokenRepository
from .trusted_service_repository import TrustedServiceRepository

__all__ = ["FieldMappingRepository", "TokenRepository", "TrustedServiceRepository"]
