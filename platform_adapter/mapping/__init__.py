"""Bidirectional field mapping engine."""

from .cache import MappingRuleCache, ReadWriteLock
from .field_mapper import FieldMapper, MappingRuleStore
from .paths import MISSING, JsonValue, get_path, is_index_segment, set_path, split_path
from .transforms import (
    TransformName,
    apply_inverse_transform,
    apply_transform,
    inverse_name,
    is_known_transform,
)

__all__ = [
    "FieldMapper",
    "JsonValue",
    "MISSING",
    "MappingRuleCache",
    "MappingRuleStore",
    "ReadWriteLock",
    "TransformName",
    "apply_inverse_transform",
    "apply_transform",
    "get_path",
    "inverse_name",
    "is_index_segment",
    "is_known_transform",
    "set_path",
    "split_path",
]
