"""Mapping rule cache guarded by a reader/writer lock."""

import threading
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from ..constants import Limits
from ..schemas.field_mapping_schema import FieldMappingRead


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MappingRuleCache:
    """
    Rule sets keyed by ``"{platform_id}:{entity_type}"``.

    Entries live until ``clear()``. ``ttl_seconds`` is kept for configuration
    parity but lookups never consult it.
    """

    def __init__(self, ttl_seconds: int = Limits.DEFAULT_CACHE_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, List[FieldMappingRead]] = {}
        self._generation = 0
        self._lock = ReadWriteLock()

    @staticmethod
    def key(platform_id: str, entity_type: str) -> str:
        return f"{platform_id}:{entity_type}"

    def get(self, platform_id: str, entity_type: str) -> Optional[List[FieldMappingRead]]:
        with self._lock.read():
            return self._entries.get(self.key(platform_id, entity_type))

    def get_or_load(
        self,
        platform_id: str,
        entity_type: str,
        loader: Callable[[str, str], List[FieldMappingRead]],
    ) -> List[FieldMappingRead]:
        """
        Return the cached rule set, loading and storing it on a miss.

        The loader runs outside the lock. A result loaded before a concurrent
        ``clear()`` is returned to its caller but not stored.
        """
        key = self.key(platform_id, entity_type)
        with self._lock.read():
            cached = self._entries.get(key)
            generation = self._generation
        if cached is not None:
            return cached

        rules = list(loader(platform_id, entity_type))
        with self._lock.write():
            if self._generation == generation:
                self._entries[key] = rules
        return rules

    def clear(self) -> None:
        with self._lock.write():
            self._entries = {}
            self._generation += 1

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock.read():
            return key in self._entries
