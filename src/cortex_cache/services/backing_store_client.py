"""Backing store client: the only component that talks to the EntityStore.

It turns entity names into locators, validates and encodes bodies on the
way in, decodes and validates them on the way out, and keeps request
accounting. fetch() and persist() are the only suspension points of the
read and write paths.
"""

import gzip
import json
import logging
import time
import zlib
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from cortex_cache.config import get_settings
from cortex_cache.dto import EntityDocument, StoredEntityDocument
from cortex_cache.entities import Entity
from cortex_cache.errors import (
    BackingStoreConnectionError,
    BodyNotFoundError,
    CortexError,
    EntityValidationError,
    StorageError,
)
from cortex_cache.models import PersistResult, RequestMetrics
from cortex_cache.protocols import EntityStore
from cortex_cache.utils import json_bytes, round_half_up, sanitize_name, utcnow

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
COMPRESSIONS = ("gzip", "none")


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class BackingStoreClient:
    """Entity-level access to an EntityStore with request metrics.

    Example:
        ```python
        client = BackingStoreClient.create(store=FileEntityRepository("./data"))
        await client.connect()
        result = await client.persist("Alpha", entity)
        same = await client.fetch(result.locator)
        ```
    """

    def __init__(
        self,
        store: EntityStore,
        base_path: str = "cortex/entities",
        compression: str = "gzip",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the client.

        Args:
            store: The backing collaborator holding encoded bodies.
            base_path: Locator prefix for every body.
            compression: "gzip" or "none".
            clock: Source of "now" for envelope and connection timestamps.
        """
        if compression not in COMPRESSIONS:
            raise ValueError(f"compression must be one of {COMPRESSIONS}, got {compression!r}")

        self._store = store
        self._base_path = base_path.strip("/")
        self._compression = compression
        self._clock = clock
        self._connected = False

        self._total_requests = 0
        self._successful_requests = 0
        self._failed_requests = 0
        self._average_response_time_ms = 0.0
        self._fetch_requests = 0
        self._fetch_successes = 0
        self._persist_requests = 0
        self._persist_successes = 0
        self._connection_latency_ms: float | None = None
        self._last_connection_time: datetime | None = None

    @classmethod
    def create(
        cls,
        store: EntityStore,
        base_path: str | None = None,
        compression: str | None = None,
    ) -> "BackingStoreClient":
        """Factory method to create BackingStoreClient with settings defaults.

        Args:
            store: The backing collaborator (required).
            base_path: Locator prefix. If None, uses settings.
            compression: "gzip" or "none". If None, uses settings.

        Returns:
            Configured BackingStoreClient
        """
        settings = get_settings()
        return cls(
            store=store,
            base_path=base_path or settings.base_path,
            compression=compression or settings.compression,
        )

    # -- connection ---------------------------------------------------

    async def connect(self) -> dict[str, Any]:
        """Check that the backing store is reachable. Idempotent once connected.

        Returns:
            Connection status with latency and store description

        Raises:
            BackingStoreConnectionError: If the store does not answer
        """
        if self._connected:
            return self._connection_status()

        logger.info("Connecting to backing store %s", self._store.describe())
        start = time.perf_counter()
        try:
            reachable = await self._store.ping()
        except (CortexError, OSError) as e:
            raise BackingStoreConnectionError(
                f"Backing store ping failed: {e}", operation="connect"
            ) from e

        if not reachable:
            raise BackingStoreConnectionError("Backing store unreachable", operation="connect")

        self._connection_latency_ms = _elapsed_ms(start)
        self._last_connection_time = self._clock()
        self._connected = True
        logger.info("Backing store connected in %.1fms", self._connection_latency_ms)
        return self._connection_status()

    def _connection_status(self) -> dict[str, Any]:
        return {
            "status": "CONNECTED",
            "connection_latency_ms": self._connection_latency_ms,
            "store": self._store.describe(),
        }

    async def ping(self) -> bool:
        """Check the store without touching connection state or metrics."""
        try:
            return await self._store.ping()
        except (CortexError, OSError):
            return False

    def _require_connected(self, operation: str, **context: Any) -> None:
        if not self._connected:
            raise BackingStoreConnectionError(
                "Backing store not connected. Call connect() first.",
                operation=operation,
                **context,
            )

    # -- locators and encoding ----------------------------------------

    def locator_for(self, name: str) -> str:
        """Deterministic locator for an entity name.

        Raises:
            EntityValidationError: If nothing path-safe is left of the name
        """
        sanitized = sanitize_name(name)
        if not sanitized:
            raise EntityValidationError(
                "Entity name has no path-safe characters", entity_name=name, operation="persist"
            )
        return f"{self._base_path}/{sanitized}.json"

    def _validate(self, entity: Entity, name: str) -> EntityDocument:
        try:
            document = EntityDocument.model_validate(entity.to_dict())
        except (ValidationError, AttributeError, KeyError, TypeError) as e:
            raise EntityValidationError(
                f"Entity does not have the minimal shape: {e}", entity_name=name, operation="persist"
            ) from e

        if document.name != name:
            raise EntityValidationError(
                f"Entity body is named {document.name!r}", entity_name=name, operation="persist"
            )
        return document

    def _encode(self, document: EntityDocument, compression: str) -> bytes:
        envelope = StoredEntityDocument(
            entity=document,
            stored_at=self._clock(),
            compression=compression,
        )
        payload = envelope.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        if compression == "gzip":
            return gzip.compress(payload, mtime=0)
        return payload

    def _decode(self, payload: bytes, locator: str) -> Entity:
        if payload.startswith(GZIP_MAGIC):
            try:
                payload = gzip.decompress(payload)
            except (OSError, EOFError, zlib.error) as e:
                raise StorageError(
                    f"Stored body is not valid gzip: {e}", locator=locator, operation="fetch"
                ) from e

        try:
            data = json.loads(payload)
            # Bodies written by other tools may be bare entities without an envelope
            if isinstance(data, dict) and "entity" in data:
                document = StoredEntityDocument.model_validate(data).entity
            else:
                document = EntityDocument.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise EntityValidationError(
                f"Stored body is not a valid entity: {e}", locator=locator, operation="fetch"
            ) from e

        return document.to_entity()

    # -- accounting ---------------------------------------------------

    def _record(self, response_time_ms: float, success: bool) -> None:
        if success:
            self._successful_requests += 1
        else:
            self._failed_requests += 1

        completed = self._successful_requests + self._failed_requests
        self._average_response_time_ms = (
            self._average_response_time_ms * (completed - 1) + response_time_ms
        ) / completed

    def metrics(self) -> RequestMetrics:
        return RequestMetrics(
            total_requests=self._total_requests,
            successful_requests=self._successful_requests,
            failed_requests=self._failed_requests,
            average_response_time_ms=self._average_response_time_ms,
            fetch_requests=self._fetch_requests,
            fetch_successes=self._fetch_successes,
            persist_requests=self._persist_requests,
            persist_successes=self._persist_successes,
            connection_latency_ms=self._connection_latency_ms,
            last_connection_time=self._last_connection_time,
        )

    # -- operations ---------------------------------------------------

    async def fetch(self, locator: str) -> Entity:
        """Load the full entity stored at ``locator``.

        Raises:
            BodyNotFoundError: If nothing is stored at the locator
            EntityValidationError: If the stored body is not a valid entity
            StorageError: If the store fails
            BackingStoreConnectionError: If connect() has not succeeded
        """
        self._require_connected("fetch", locator=locator)

        self._total_requests += 1
        self._fetch_requests += 1
        start = time.perf_counter()

        try:
            payload = await self._store.read(locator)
            if payload is None:
                raise BodyNotFoundError(
                    "No entity body at locator", locator=locator, operation="fetch"
                )
            entity = self._decode(payload, locator)
        except CortexError as e:
            self._record(_elapsed_ms(start), success=False)
            logger.error("Failed to fetch %s: %s", locator, e)
            raise
        except OSError as e:
            self._record(_elapsed_ms(start), success=False)
            logger.error("Failed to fetch %s: %s", locator, e)
            raise StorageError(f"Backing store read failed: {e}", locator=locator, operation="fetch") from e

        response_time_ms = _elapsed_ms(start)
        self._record(response_time_ms, success=True)
        self._fetch_successes += 1
        logger.debug("Fetched %s in %.1fms", locator, response_time_ms)
        return entity

    async def persist(self, name: str, entity: Entity, compression: str | None = None) -> PersistResult:
        """Write (or overwrite) the body of ``name``.

        Args:
            name: Entity name, must equal ``entity.name``
            entity: Full entity body
            compression: Per-call override of the configured compression

        Returns:
            PersistResult with the locator and size accounting

        Raises:
            EntityValidationError: If the entity does not have the minimal shape
            StorageError: If the store fails
            BackingStoreConnectionError: If connect() has not succeeded
        """
        self._require_connected("persist", entity_name=name)
        compression = compression or self._compression
        if compression not in COMPRESSIONS:
            raise ValueError(f"compression must be one of {COMPRESSIONS}, got {compression!r}")

        self._total_requests += 1
        self._persist_requests += 1
        start = time.perf_counter()

        try:
            locator = self.locator_for(name)
            document = self._validate(entity, name)
            raw_size = len(json_bytes(document.to_wire()))
            payload = self._encode(document, compression)
            await self._store.write(locator, payload)
        except CortexError as e:
            self._record(_elapsed_ms(start), success=False)
            logger.error("Failed to persist %s: %s", name, e)
            raise
        except OSError as e:
            self._record(_elapsed_ms(start), success=False)
            logger.error("Failed to persist %s: %s", name, e)
            raise StorageError(
                f"Backing store write failed: {e}", entity_name=name, operation="persist"
            ) from e

        response_time_ms = _elapsed_ms(start)
        self._record(response_time_ms, success=True)
        self._persist_successes += 1
        logger.info("Persisted %s to %s in %.1fms", name, locator, response_time_ms)

        return PersistResult(
            locator=locator,
            size_bytes=raw_size,
            stored_bytes=len(payload),
            compression_ratio=round_half_up(raw_size / len(payload), 1),
            response_time_ms=response_time_ms,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def store(self) -> EntityStore:
        """Get the underlying EntityStore (for testing)."""
        return self._store
