"""
Pytest configuration and shared fixtures.

- clock: controllable time source for catalog, tracker and metrics
- memory_store: in-process EntityStore
- flaky_store: EntityStore whose reads/writes/pings can be made to fail
- service: TieredMemoryService over memory_store (cache capacity 3)
"""

from datetime import datetime, timedelta, timezone

import pytest

from cortex_cache.entities import Entity
from cortex_cache.errors import StorageError
from cortex_cache.repositories import InMemoryEntityRepository
from cortex_cache.services import (
    AccessTracker,
    BackingStoreClient,
    LRUCache,
    ReferenceCatalog,
    TieredMemoryService,
)


class FakeClock:
    """Callable returning a fixed time that tests move forward explicitly."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FlakyEntityRepository(InMemoryEntityRepository):
    """In-memory store with switchable failures."""

    def __init__(self) -> None:
        super().__init__()
        self.reachable = True
        self.fail_reads = False
        self.fail_writes = False
        self.reads = 0
        self.writes = 0

    async def ping(self) -> bool:
        return self.reachable

    async def read(self, locator: str) -> bytes | None:
        self.reads += 1
        if self.fail_reads:
            raise StorageError("read refused", locator=locator, operation="read")
        return await super().read(locator)

    async def write(self, locator: str, payload: bytes) -> None:
        self.writes += 1
        if self.fail_writes:
            raise OSError("disk full")
        await super().write(locator, payload)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> InMemoryEntityRepository:
    return InMemoryEntityRepository()


@pytest.fixture
def flaky_store() -> FlakyEntityRepository:
    return FlakyEntityRepository()


def build_service(store, clock=None, capacity: int = 3, compression: str = "gzip", reference_store=None):
    clock = clock or FakeClock()
    return TieredMemoryService(
        catalog=ReferenceCatalog(reference_store, clock=clock),
        backing_store=BackingStoreClient(store, compression=compression, clock=clock),
        cache=LRUCache(capacity),
        access_tracker=AccessTracker(clock=clock),
        clock=clock,
    )


@pytest.fixture
def service(flaky_store, clock) -> TieredMemoryService:
    """Uninitialized service over a FlakyEntityRepository; tests await initialize()."""
    return build_service(flaky_store, clock=clock)


@pytest.fixture
def service_factory(clock):
    """Build services with custom stores or capacities."""

    def _factory(store, capacity: int = 3, compression: str = "gzip", reference_store=None):
        return build_service(
            store,
            clock=clock,
            capacity=capacity,
            compression=compression,
            reference_store=reference_store,
        )

    return _factory


@pytest.fixture
def make_entity():
    """Return a builder for sample entities."""

    def _make(name: str = "Alpha", entity_type: str = "Fact", observations=("o1",), metadata=None) -> Entity:
        return Entity(name=name, entity_type=entity_type, observations=tuple(observations), metadata=metadata)

    return _make
