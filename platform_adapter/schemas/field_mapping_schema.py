"""
Pydantic schemas for mapping rules.

``FieldMappingRead`` is what the Field Mapper and the management surface see;
``FieldMappingUpsert`` is the raw management input before normalization.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldMappingRead(BaseModel):
    """A stored mapping rule."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    platform_id: str
    entity_type: str
    source_field: str = Field(..., description="Dot path read in the forward direction")
    target_field: str = Field(..., description="Dot path written in the forward direction")
    transform: Optional[str] = Field(None, description="Transform name, if any")
    is_active: bool = True
    created_at: Optional[datetime] = None


class FieldMappingUpsert(BaseModel):
    """Management input for creating or replacing a mapping rule."""

    platform_id: str = ""
    entity_type: str = ""
    source_field: str = ""
    target_field: str = ""
    transform: Optional[str] = None
    is_active: Optional[bool] = None
