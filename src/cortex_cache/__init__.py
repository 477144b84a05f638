"""Cortex Cache - Tiered entity memory with lazy loading.

This package keeps a small, always-resident catalog of lightweight
references in front of a larger backing store of full entity bodies,
with a bounded LRU cache in between.

Layers:
    - protocols: Interface contracts (EntityStore, ReferenceStore)
    - repositories: Data access implementations (files, Redis, in-memory)
    - services: Core components and the tiered orchestrator
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects and storage documents
    - entities: Domain models (internal)

Usage:
    ```python
    from cortex_cache.repositories import FileEntityRepository, JsonFileReferenceStore
    from cortex_cache.services import TieredMemoryService

    service = TieredMemoryService.create(
        entity_store=FileEntityRepository.create("./cortex_data"),
        reference_store=JsonFileReferenceStore.create("./cortex_data/catalog.json"),
    )
    await service.initialize()
    ```

For HTTP API:
    ```python
    from cortex_cache.api.app import app
    ```
"""

__version__ = "3.0.0"

from cortex_cache.config import Settings, get_settings
from cortex_cache.entities import AccessRecord, Entity, LightweightReference, Priority, QualityTag
from cortex_cache.errors import (
    BackingStoreConnectionError,
    BodyNotFoundError,
    CortexError,
    EntityNotFoundError,
    EntityValidationError,
    InitializationError,
    StorageError,
)
from cortex_cache.protocols import EntityStore, ReferenceStore
from cortex_cache.repositories import (
    FileEntityRepository,
    InMemoryEntityRepository,
    JsonFileReferenceStore,
    RedisEntityRepository,
)
from cortex_cache.services import (
    AccessTracker,
    BackingStoreClient,
    LRUCache,
    MetricsAggregator,
    ReferenceCatalog,
    TieredMemoryService,
)

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "EntityStore",
    "ReferenceStore",
    # Services (core)
    "TieredMemoryService",
    "ReferenceCatalog",
    "AccessTracker",
    "BackingStoreClient",
    "LRUCache",
    "MetricsAggregator",
    # Repositories (data access)
    "FileEntityRepository",
    "InMemoryEntityRepository",
    "JsonFileReferenceStore",
    "RedisEntityRepository",
    # Entities (domain models)
    "Entity",
    "LightweightReference",
    "AccessRecord",
    "Priority",
    "QualityTag",
    # Errors
    "CortexError",
    "InitializationError",
    "EntityNotFoundError",
    "BodyNotFoundError",
    "EntityValidationError",
    "BackingStoreConnectionError",
    "StorageError",
]
