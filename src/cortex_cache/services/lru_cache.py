"""Bounded least-recently-used cache for full entity bodies."""

import logging
from collections import OrderedDict
from typing import Generic, TypeVar

from cortex_cache.models import CacheStats

logger = logging.getLogger(__name__)

V = TypeVar("V")


class LRUCache(Generic[V]):
    """Fixed-capacity key -> value store with LRU eviction.

    Entries are kept in recency order, least recently used first. Among
    entries never touched after insertion, the earliest inserted is the
    first to go.

    Hit/miss counters are not updated by get(): a "hit" is an entity-level
    event, so the TieredMemoryService calls record_hit()/record_miss().
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self._capacity = capacity
        self._entries: OrderedDict[str, V] = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str, default: V | None = None) -> V | None:
        """Return the value for ``key`` and mark it most recently used."""
        if key not in self._entries:
            return default
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: str, value: V) -> None:
        """Insert or overwrite ``key`` as most recently used, evicting if over capacity."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value

        if len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted %s from cache", evicted)

    def has(self, key: str) -> bool:
        """Membership test that does not affect recency."""
        return key in self._entries

    def record_hit(self) -> None:
        self._hits += 1

    def record_miss(self) -> None:
        self._misses += 1

    def clear(self) -> None:
        """Drop all entries. Counters are kept."""
        self._entries.clear()

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return list(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            capacity=self._capacity,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)
