"""Tiered memory service: the orchestrator of the read and write paths.

Read:  name -> catalog -> cache -> [miss] backing store -> cache -> caller
Write: name + body -> backing store -> catalog -> cache -> caller
"""

import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from cortex_cache.config import get_settings
from cortex_cache.dto import EntityDocument
from cortex_cache.entities import Entity
from cortex_cache.errors import (
    BodyNotFoundError,
    CortexError,
    EntityNotFoundError,
    EntityValidationError,
    InitializationError,
)
from cortex_cache.models import HealthSnapshot, InitializationResult, PersistResult
from cortex_cache.protocols import EntityStore, ReferenceStore
from cortex_cache.utils import utcnow

from .access_tracker import AccessTracker
from .backing_store_client import BackingStoreClient
from .keyed_lock import KeyedLock
from .lru_cache import LRUCache
from .metrics_service import DEFAULT_AVG_ENTITY_BYTES, MetricsAggregator
from .reference_catalog import ReferenceCatalog

logger = logging.getLogger(__name__)


def cache_key(name: str) -> str:
    """Cache key shared by the read and write paths."""
    return f"entity:{name}"


class TieredMemoryService:
    """Core orchestration service over the catalog, cache and backing store.

    Components are injected; nothing here reaches for globals. Cached
    entities never leave the service: callers get copies. Catalog and
    cache are only mutated after the backing store call of a request has
    returned successfully, so a failed or cancelled request leaves them as
    they were. Requests for the same name are serialized; different names
    proceed concurrently.

    Example:
        ```python
        from cortex_cache.repositories import FileEntityRepository, JsonFileReferenceStore
        from cortex_cache.services import TieredMemoryService

        service = TieredMemoryService.create(
            entity_store=FileEntityRepository.create(),
            reference_store=JsonFileReferenceStore.create(),
        )
        await service.initialize()
        await service.put_entity("Alpha", {"entityType": "Fact", "observations": ["o1"]})
        entity = await service.get_entity("Alpha")  # served from the cache
        ```
    """

    def __init__(
        self,
        catalog: ReferenceCatalog,
        backing_store: BackingStoreClient,
        cache: LRUCache,
        access_tracker: AccessTracker,
        avg_entity_bytes: int = DEFAULT_AVG_ENTITY_BYTES,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the service.

        Args:
            catalog: Reference catalog (required).
            backing_store: Client for the backing store (required).
            cache: Bounded cache of full entities (required).
            access_tracker: Access pattern tracker (required).
            avg_entity_bytes: Assumed full-entity size for the memory reduction figures.
            clock: Source of "now" for metrics snapshots.
        """
        self._catalog = catalog
        self._backing_store = backing_store
        self._cache = cache
        self._access_tracker = access_tracker
        self._metrics = MetricsAggregator(
            catalog=catalog,
            backing_store=backing_store,
            cache=cache,
            access_tracker=access_tracker,
            avg_entity_bytes=avg_entity_bytes,
            clock=clock,
        )
        self._locks = KeyedLock()
        self._initialized = False
        self._init_result: InitializationResult | None = None

    @classmethod
    def create(
        cls,
        entity_store: EntityStore,
        reference_store: ReferenceStore | None = None,
        cache_size: int | None = None,
        base_path: str | None = None,
        compression: str | None = None,
        avg_entity_bytes: int | None = None,
    ) -> "TieredMemoryService":
        """Factory method to wire a TieredMemoryService with settings defaults.

        Args:
            entity_store: Backing collaborator for full bodies (required).
            reference_store: Durable catalog store. If None, the catalog is in-memory only.
            cache_size: Bounded cache capacity. If None, uses settings.
            base_path: Locator prefix. If None, uses settings.
            compression: "gzip" or "none". If None, uses settings.
            avg_entity_bytes: Assumed full-entity size. If None, uses settings.

        Returns:
            Configured TieredMemoryService
        """
        settings = get_settings()
        return cls(
            catalog=ReferenceCatalog(reference_store),
            backing_store=BackingStoreClient.create(
                store=entity_store,
                base_path=base_path,
                compression=compression,
            ),
            cache=LRUCache(cache_size or settings.cache_size),
            access_tracker=AccessTracker(),
            avg_entity_bytes=avg_entity_bytes or settings.avg_entity_bytes,
        )

    async def initialize(self) -> InitializationResult:
        """Load the catalog and connect the backing store. Idempotent.

        Returns:
            InitializationResult with status "READY"

        Raises:
            InitializationError: If either tier is unusable. Nothing stays
                half-initialized.
        """
        if self._initialized and self._init_result is not None:
            return self._init_result

        logger.info("Initializing tiered memory service")
        start = time.perf_counter()
        try:
            loaded = self._catalog.initialize()
            connection = await self._backing_store.connect()
        except InitializationError:
            self._catalog.reset()
            logger.error("Tiered memory service initialization failed", exc_info=True)
            raise
        except CortexError as e:
            self._catalog.reset()
            logger.error("Tiered memory service initialization failed: %s", e)
            raise InitializationError(f"Initialization failed: {e}", operation="initialize") from e

        self._init_result = InitializationResult(
            status="READY",
            references_loaded=loaded,
            initialization_time_ms=(time.perf_counter() - start) * 1000,
            connection_latency_ms=connection.get("connection_latency_ms"),
        )
        self._initialized = True
        logger.info(
            "Tiered memory service ready with %d references in %.1fms",
            loaded,
            self._init_result.initialization_time_ms,
        )
        return self._init_result

    def _require_initialized(self, operation: str, name: str | None = None) -> None:
        if not self._initialized:
            raise InitializationError(
                "Service not initialized. Call initialize() first.",
                entity_name=name,
                operation=operation,
            )

    async def get_entity(self, name: str) -> Entity:
        """Return the full entity for ``name``.

        Business logic:
        1. Resolve the name in the catalog
        2. Record the access (also when the name is unknown)
        3. Serve from the cache on a hit
        4. Otherwise fetch from the backing store and fill the cache

        Raises:
            EntityNotFoundError: If the catalog has no reference for ``name``
            BodyNotFoundError: If the reference's locator does not resolve to ``name``
            EntityValidationError: If the stored body is malformed
            StorageError: If the backing store fails
        """
        self._require_initialized("get_entity", name)

        async with self._locks.hold(name):
            reference = self._catalog.get(name)
            self._access_tracker.record(name)

            if reference is None:
                raise EntityNotFoundError(
                    "Entity not found in catalog", entity_name=name, operation="get_entity"
                )

            key = cache_key(name)
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.record_hit()
                logger.debug("Cache hit for %s", name)
                return cached.copy()

            entity = await self._backing_store.fetch(reference.locator)
            if entity.name != reference.entity_name:
                raise BodyNotFoundError(
                    f"Locator resolves to entity {entity.name!r}",
                    entity_name=name,
                    locator=reference.locator,
                    operation="get_entity",
                )

            self._cache.set(key, entity)
            self._cache.record_miss()
            logger.debug("Cache miss for %s, loaded from %s", name, reference.locator)
            return entity.copy()

    async def put_entity(self, name: str, entity: Entity | Mapping[str, Any]) -> PersistResult:
        """Store ``entity`` under ``name``.

        Args:
            name: Entity name
            entity: An Entity named ``name``, or a wire mapping with
                ``entityType``, ``observations`` and optional ``metadata``

        Returns:
            PersistResult carrying the locator

        Raises:
            EntityValidationError: If the entity does not have the minimal shape
            StorageError: If the backing store fails; catalog and cache are untouched
        """
        self._require_initialized("put_entity", name)
        entity = self._coerce(name, entity)

        async with self._locks.hold(name):
            result = await self._backing_store.persist(name, entity)
            self._catalog.put(name, entity, result.locator)
            self._cache.set(cache_key(name), entity.copy())
            return result

    def _coerce(self, name: str, entity: Entity | Mapping[str, Any]) -> Entity:
        if isinstance(entity, Entity):
            if entity.name != name:
                raise EntityValidationError(
                    f"Entity body is named {entity.name!r}", entity_name=name, operation="put_entity"
                )
            return entity

        if not isinstance(entity, Mapping):
            raise EntityValidationError(
                f"Unsupported entity type {type(entity).__name__}",
                entity_name=name,
                operation="put_entity",
            )

        if entity.get("name", name) != name:
            raise EntityValidationError(
                f"Entity body is named {entity['name']!r}", entity_name=name, operation="put_entity"
            )
        try:
            return EntityDocument.model_validate({**entity, "name": name}).to_entity()
        except ValidationError as e:
            raise EntityValidationError(
                f"Entity does not have the minimal shape: {e}", entity_name=name, operation="put_entity"
            ) from e

    def get_metrics(self) -> HealthSnapshot:
        """Snapshot of catalog, backing store, cache and access statistics."""
        return self._metrics.snapshot()

    async def is_healthy(self) -> bool:
        """True if initialized and the backing store answers."""
        return self._initialized and await self._backing_store.ping()

    def close(self) -> None:
        """Flush the catalog to its durable store."""
        if self._initialized:
            self._catalog.flush()
            logger.info("Catalog flushed with %d references", len(self._catalog))

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def catalog(self) -> ReferenceCatalog:
        """Get the reference catalog (for testing)."""
        return self._catalog

    @property
    def backing_store(self) -> BackingStoreClient:
        """Get the backing store client (for testing)."""
        return self._backing_store

    @property
    def cache(self) -> LRUCache:
        """Get the bounded cache (for testing)."""
        return self._cache

    @property
    def access_tracker(self) -> AccessTracker:
        """Get the access tracker (for testing)."""
        return self._access_tracker
