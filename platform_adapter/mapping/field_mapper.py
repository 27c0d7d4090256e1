"""
Field Mapper: rewrites nested payloads between schemas using stored rules.

Forward ``transform`` reads each rule's source field and writes its target
field; ``reverse_transform`` does the opposite with the inverse transform.
"""

import copy
from typing import Any, Dict, List, Optional, Protocol

from ..exceptions import BaseError, MappingError
from ..schemas.field_mapping_schema import FieldMappingRead
from ..utils.json_utils import dumps, loads_object
from ..utils.logger import get_logger
from .cache import MappingRuleCache
from .paths import MISSING, get_path, set_path
from .transforms import apply_inverse_transform, apply_transform


class MappingRuleStore(Protocol):
    """Anything that can fetch the active rule set for a key."""

    def find_active(self, platform_id: str, entity_type: str) -> List[FieldMappingRead]: ...


class FieldMapper:
    """Maps payloads with rules from a store, cached per (platform, entity type)."""

    def __init__(self, store: MappingRuleStore, cache: Optional[MappingRuleCache] = None):
        self.store = store
        self.cache = cache if cache is not None else MappingRuleCache()
        self.logger = get_logger()

    def _load_rules(self, platform_id: str, entity_type: str) -> List[FieldMappingRead]:
        try:
            return self.store.find_active(platform_id, entity_type)
        except Exception as e:
            raise MappingError(
                f"Failed to load mapping rules for {platform_id}:{entity_type}: {str(e)}",
                cause=e,
                platform_id=platform_id,
                entity_type=entity_type,
                cause_error_id=e.error_id if isinstance(e, BaseError) else None,
            ) from e

    def get_rules(self, platform_id: str, entity_type: str) -> List[FieldMappingRead]:
        """
        Return the rule set for a key, fetching it on a cache miss.

        Raises:
            MappingError: If the store cannot be read
        """
        return self.cache.get_or_load(platform_id, entity_type, self._load_rules)

    def transform(self, platform_id: str, entity_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Map ``data`` from the canonical schema to the platform schema.

        With no rules the input is returned as is. Otherwise a new dict holds
        only the mapped fields; rules whose source path is absent are skipped.
        """
        rules = self.get_rules(platform_id, entity_type)
        if not rules:
            return data

        result: Dict[str, Any] = {}
        for rule in rules:
            value = get_path(data, rule.source_field)
            if value is MISSING:
                continue
            if rule.transform:
                value = apply_transform(value, rule.transform)
            set_path(result, rule.target_field, copy.deepcopy(value))

        self.logger.debug(
            "Mapped payload",
            extra={
                "platform_id": platform_id,
                "entity_type": entity_type,
                "rule_count": len(rules),
                "direction": "forward",
            },
        )
        return result

    def reverse_transform(
        self, platform_id: str, entity_type: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Map ``data`` from the platform schema back to the canonical one."""
        rules = self.get_rules(platform_id, entity_type)
        if not rules:
            return data

        result: Dict[str, Any] = {}
        for rule in rules:
            value = get_path(data, rule.target_field)
            if value is MISSING:
                continue
            if rule.transform:
                value = apply_inverse_transform(value, rule.transform)
            set_path(result, rule.source_field, copy.deepcopy(value))

        self.logger.debug(
            "Mapped payload",
            extra={
                "platform_id": platform_id,
                "entity_type": entity_type,
                "rule_count": len(rules),
                "direction": "reverse",
            },
        )
        return result

    def transform_json(self, platform_id: str, entity_type: str, raw_json) -> str:
        """
        Decode a JSON object, map it forward and encode the result.

        Raises:
            ValueError: If ``raw_json`` is not a JSON object
            MappingError: If the store cannot be read
        """
        data = loads_object(raw_json)
        return dumps(self.transform(platform_id, entity_type, data))

    def clear_cache(self) -> None:
        self.cache.clear()
        self.logger.info("Mapping cache cleared")
