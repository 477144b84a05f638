"""Reference catalog: the always-resident tier.

Maps entity names to LightweightReferences. The catalog never talks to the
backing store; it only records where a body lives and a few derived facts
about it (summary, priority, size, quality tier).
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from cortex_cache.dto import ReferenceDocument
from cortex_cache.entities import Entity, LightweightReference, Priority, QualityTag
from cortex_cache.errors import InitializationError
from cortex_cache.models import CatalogSize
from cortex_cache.protocols import ReferenceStore
from cortex_cache.utils import json_bytes, round_half_up, utcnow

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 100
ELLIPSIS = "..."
BOOTSTRAP_ENTITY_TYPE = "System_Bootstrap_Protocol"


def derive_summary(entity: Entity) -> str:
    """First observation, cut to 100 characters plus "..." when longer."""
    if entity.observations:
        first = entity.observations[0]
        if len(first) > SUMMARY_MAX_CHARS:
            return first[:SUMMARY_MAX_CHARS] + ELLIPSIS
        return first
    return f"{entity.entity_type} entity"


def derive_priority(entity: Entity) -> Priority:
    if entity.entity_type == BOOTSTRAP_ENTITY_TYPE:
        return Priority.CRITICAL
    if len(entity.observations) > 10:
        return Priority.HIGH
    if len(entity.observations) > 5:
        return Priority.MEDIUM
    return Priority.LOW


def format_size(num_bytes: int) -> str:
    """Render a byte count as "<n>B" up to 1024 bytes, else "<n.n>KB"."""
    if num_bytes > 1024:
        return f"{round_half_up(num_bytes / 1024, 1):.1f}KB"
    return f"{num_bytes}B"


def estimate_size(entity: Entity) -> str:
    return format_size(len(json_bytes(entity.to_dict())))


def extract_quality_tag(entity: Entity) -> QualityTag:
    """Return the tier of the first observation carrying a tier marker.

    Within a single observation T1 wins over T2, and T2 over T3.
    """
    for observation in entity.observations:
        for tag in QualityTag:
            if tag.value in observation:
                return tag
    return QualityTag.T3


def build_reference(
    name: str,
    entity: Entity,
    locator: str,
    now: datetime,
    previous: LightweightReference | None = None,
) -> LightweightReference:
    """Derive a reference for ``entity``, keeping history from ``previous``."""
    return LightweightReference(
        entity_name=name,
        locator=locator,
        summary=derive_summary(entity),
        priority=derive_priority(entity),
        size_estimate=estimate_size(entity),
        quality_tag=extract_quality_tag(entity),
        created_at=previous.created_at if previous else now,
        last_accessed_at=now,
        access_count=previous.access_count if previous else 0,
    )


class ReferenceCatalog:
    """In-memory name -> LightweightReference directory.

    References handed out are immutable snapshots; the catalog replaces its
    own entries when access stats change, so no caller can mutate them.

    Example:
        ```python
        catalog = ReferenceCatalog(JsonFileReferenceStore("catalog.json"))
        catalog.initialize()
        catalog.put("Alpha", entity, "cortex/entities/alpha.json")
        ref = catalog.get("Alpha")  # access_count == 1
        ```
    """

    def __init__(
        self,
        reference_store: ReferenceStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the catalog.

        Args:
            reference_store: Durable store to load from and flush to. If None,
                the catalog is purely in-memory.
            clock: Source of "now" for timestamps.
        """
        self._store = reference_store
        self._clock = clock
        self._references: dict[str, LightweightReference] = {}
        self._initialized = False

    def initialize(self) -> int:
        """Load persisted references. Idempotent.

        Returns:
            Number of references held after loading

        Raises:
            InitializationError: If the durable store is corrupt
        """
        if self._initialized:
            return len(self._references)

        loaded = self._store.load() if self._store is not None else None
        self._references = {ref.entity_name: ref for ref in loaded or []}
        self._initialized = True

        logger.info("Reference catalog initialized with %d references", len(self._references))
        return len(self._references)

    def reset(self) -> None:
        """Drop all in-memory state and return to the uninitialized state."""
        self._references.clear()
        self._initialized = False

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise InitializationError("Reference catalog not initialized. Call initialize() first.")

    def get(self, name: str) -> LightweightReference | None:
        """Look up a reference, recording the access on it.

        Args:
            name: Entity name

        Returns:
            The updated reference, or None if the name is unknown
        """
        self._require_initialized()

        reference = self._references.get(name)
        if reference is None:
            return None

        reference = replace(
            reference,
            last_accessed_at=self._clock(),
            access_count=reference.access_count + 1,
        )
        self._references[name] = reference
        return reference

    def contains(self, name: str) -> bool:
        return name in self._references

    def put(self, name: str, entity: Entity, locator: str) -> LightweightReference:
        """Create or overwrite the reference for ``name``.

        Args:
            name: Entity name
            entity: The full entity just persisted
            locator: Where the backing store put it

        Returns:
            The stored reference
        """
        self._require_initialized()

        reference = build_reference(name, entity, locator, self._clock(), self._references.get(name))
        self._references[name] = reference
        logger.debug("Catalog reference for %s -> %s (%s)", name, locator, reference.size_estimate)
        return reference

    def size(self) -> CatalogSize:
        footprint = sum(
            len(ReferenceDocument.from_reference(ref).model_dump_json(by_alias=True).encode("utf-8"))
            for ref in self._references.values()
        )
        return CatalogSize(reference_count=len(self._references), footprint_bytes=footprint)

    def flush(self) -> None:
        """Write every reference to the durable store, if there is one."""
        if self._store is None or not self._initialized:
            return
        self._store.save(list(self._references.values()))

    def references(self) -> list[LightweightReference]:
        return list(self._references.values())

    @property
    def initialized(self) -> bool:
        return self._initialized

    def __len__(self) -> int:
        return len(self._references)
