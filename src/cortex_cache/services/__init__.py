"""Service layer for business logic.

This layer contains the core components and their orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> TieredMemoryService -> ReferenceCatalog / LRUCache / BackingStoreClient -> EntityStore
    (HTTP)  -> (Orchestration)     -> (Core components)                              -> (Data Access)

Usage:
    ```python
    from cortex_cache.services import TieredMemoryService

    # Using factory method (recommended)
    service = TieredMemoryService.create(entity_store=store)
    service = TieredMemoryService.create(entity_store=store, cache_size=500)

    # Or manual creation
    service = TieredMemoryService(
        catalog=ReferenceCatalog(reference_store),
        backing_store=BackingStoreClient(store),
        cache=LRUCache(100),
        access_tracker=AccessTracker(),
    )
    ```
"""

from .access_tracker import AccessTracker
from .backing_store_client import BackingStoreClient
from .lru_cache import LRUCache
from .metrics_service import MetricsAggregator
from .reference_catalog import ReferenceCatalog
from .tiered_service import TieredMemoryService, cache_key

__all__ = [
    "AccessTracker",
    "BackingStoreClient",
    "LRUCache",
    "MetricsAggregator",
    "ReferenceCatalog",
    "TieredMemoryService",
    "cache_key",
]
