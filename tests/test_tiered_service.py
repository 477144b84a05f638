"""
Tests for the tiered memory service (read and write paths).
"""

import asyncio

import pytest

from cortex_cache.entities import Entity, Priority
from cortex_cache.errors import (
    BodyNotFoundError,
    EntityNotFoundError,
    EntityValidationError,
    InitializationError,
    StorageError,
)
from cortex_cache.repositories import FileEntityRepository, JsonFileReferenceStore
from cortex_cache.services import cache_key


@pytest.mark.asyncio
async def test_end_to_end_put_then_get(service):
    await service.initialize()

    await service.put_entity("Alpha", {"entityType": "Fact", "observations": ["o1"]})

    metrics = service.get_metrics()
    assert metrics.catalog.reference_count == 1
    assert metrics.backing_store.persist_successes == 1

    entity = await service.get_entity("Alpha")

    assert entity == Entity(name="Alpha", entity_type="Fact", observations=("o1",))
    metrics = service.get_metrics()
    assert metrics.cache.hits == 1
    assert metrics.backing_store.fetch_requests == 0


@pytest.mark.asyncio
async def test_unknown_name_touches_neither_cache_nor_store(service, flaky_store):
    await service.initialize()

    with pytest.raises(EntityNotFoundError) as exc_info:
        await service.get_entity("Ghost")

    assert exc_info.value.entity_name == "Ghost"
    assert flaky_store.reads == 0
    stats = service.cache.stats()
    assert stats.hits == stats.misses == 0
    assert service.access_tracker.get("Ghost").count == 1


@pytest.mark.asyncio
async def test_get_updates_reference_and_access(service, clock, make_entity):
    await service.initialize()
    await service.put_entity("Alpha", make_entity())
    clock.advance(minutes=5)

    await service.get_entity("Alpha")
    await service.get_entity("Alpha")

    reference = service.catalog.references()[0]
    assert reference.access_count == 2
    assert reference.last_accessed_at == clock.now
    assert service.access_tracker.get("Alpha").count == 2


@pytest.mark.asyncio
async def test_cache_miss_loads_from_store(service_factory, flaky_store, make_entity):
    service = service_factory(flaky_store, capacity=1)
    await service.initialize()
    await service.put_entity("Alpha", make_entity())
    await service.put_entity("Beta", make_entity(name="Beta"))

    entity = await service.get_entity("Alpha")

    assert entity == make_entity()
    assert flaky_store.reads == 1
    stats = service.cache.stats()
    assert stats.misses == 1
    assert stats.evictions == 2
    assert service.cache.keys() == [cache_key("Alpha")]

    await service.get_entity("Alpha")
    assert flaky_store.reads == 1
    assert service.cache.stats().hits == 1


@pytest.mark.asyncio
async def test_failed_persist_leaves_state_unchanged(service, flaky_store, make_entity):
    await service.initialize()
    flaky_store.fail_writes = True

    with pytest.raises(StorageError):
        await service.put_entity("Alpha", make_entity())

    assert not service.catalog.contains("Alpha")
    assert len(service.cache) == 0
    assert service.get_metrics().backing_store.failed_requests == 1


@pytest.mark.asyncio
async def test_failed_overwrite_keeps_previous_version(service, flaky_store, make_entity):
    await service.initialize()
    await service.put_entity("Alpha", make_entity())
    flaky_store.fail_writes = True

    with pytest.raises(StorageError):
        await service.put_entity("Alpha", make_entity(observations=["changed"]))

    assert service.catalog.references()[0].summary == "o1"
    assert await service.get_entity("Alpha") == make_entity()


@pytest.mark.asyncio
async def test_failed_fetch_does_not_fill_cache(service_factory, flaky_store, make_entity):
    service = service_factory(flaky_store, capacity=1)
    await service.initialize()
    await service.put_entity("Alpha", make_entity())
    await service.put_entity("Beta", make_entity(name="Beta"))
    flaky_store.fail_reads = True

    with pytest.raises(StorageError):
        await service.get_entity("Alpha")

    assert not service.cache.has(cache_key("Alpha"))
    assert service.cache.stats().misses == 0


@pytest.mark.asyncio
async def test_operations_before_initialize(service, make_entity):
    with pytest.raises(InitializationError):
        await service.get_entity("Alpha")
    with pytest.raises(InitializationError):
        await service.put_entity("Alpha", make_entity())


@pytest.mark.asyncio
async def test_initialize_is_idempotent(service, make_entity):
    first = await service.initialize()
    await service.put_entity("Alpha", make_entity())
    second = await service.initialize()

    assert first is second
    assert first.status == "READY"
    assert service.catalog.contains("Alpha")


@pytest.mark.asyncio
async def test_initialize_fails_when_store_unreachable(service, flaky_store):
    flaky_store.reachable = False

    with pytest.raises(InitializationError):
        await service.initialize()

    assert not service.initialized
    assert not service.catalog.initialized

    flaky_store.reachable = True
    result = await service.initialize()
    assert result.status == "READY"


@pytest.mark.asyncio
async def test_initialize_fails_on_corrupt_catalog(service_factory, flaky_store, tmp_path):
    catalog_path = tmp_path / "catalog.json"
    catalog_path.write_text("{broken", encoding="utf-8")
    service = service_factory(flaky_store, reference_store=JsonFileReferenceStore(catalog_path))

    with pytest.raises(InitializationError):
        await service.initialize()
    assert not service.initialized


@pytest.mark.asyncio
async def test_sanitized_name_collision_is_detected(service_factory, flaky_store, make_entity):
    service = service_factory(flaky_store, capacity=1)
    await service.initialize()
    await service.put_entity("Foo Bar", make_entity(name="Foo Bar"))
    await service.put_entity("foo_bar", make_entity(name="foo_bar"))

    with pytest.raises(BodyNotFoundError) as exc_info:
        await service.get_entity("Foo Bar")

    assert exc_info.value.locator == "cortex/entities/foo_bar.json"
    assert not service.cache.has(cache_key("Foo Bar"))


@pytest.mark.asyncio
async def test_put_accepts_mapping_and_validates(service):
    await service.initialize()

    result = await service.put_entity(
        "Boot",
        {"entityType": "System_Bootstrap_Protocol", "observations": [], "metadata": {"v": 3}},
    )

    assert result.locator == "cortex/entities/boot.json"
    reference = service.catalog.references()[0]
    assert reference.priority is Priority.CRITICAL
    assert reference.summary == "System_Bootstrap_Protocol entity"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"observations": ["o1"]},
        {"entityType": "", "observations": []},
        {"entityType": "Fact"},
        {"name": "Other", "entityType": "Fact", "observations": []},
    ],
)
async def test_put_rejects_malformed_mappings(service, flaky_store, payload):
    await service.initialize()

    with pytest.raises(EntityValidationError):
        await service.put_entity("Alpha", payload)

    assert flaky_store.writes == 0
    assert not service.catalog.contains("Alpha")


@pytest.mark.asyncio
async def test_put_rejects_entity_with_other_name(service, make_entity):
    await service.initialize()

    with pytest.raises(EntityValidationError):
        await service.put_entity("Beta", make_entity(name="Alpha"))


@pytest.mark.asyncio
async def test_concurrent_reads_fetch_once(service_factory, flaky_store, make_entity):
    service = service_factory(flaky_store, capacity=1)
    await service.initialize()
    await service.put_entity("Alpha", make_entity())
    await service.put_entity("Beta", make_entity(name="Beta"))

    results = await asyncio.gather(*(service.get_entity("Alpha") for _ in range(5)))

    assert all(entity == make_entity() for entity in results)
    assert flaky_store.reads == 1
    stats = service.cache.stats()
    assert stats.misses == 1
    assert stats.hits == 4


@pytest.mark.asyncio
async def test_is_healthy(service, flaky_store):
    assert await service.is_healthy() is False
    await service.initialize()
    assert await service.is_healthy() is True
    flaky_store.reachable = False
    assert await service.is_healthy() is False


@pytest.mark.asyncio
async def test_catalog_survives_restart(service_factory, tmp_path, make_entity):
    store = FileEntityRepository(tmp_path / "bodies")
    references = JsonFileReferenceStore(tmp_path / "catalog.json")

    first = service_factory(store, reference_store=references)
    await first.initialize()
    await first.put_entity("Alpha", make_entity(observations=["T1 verified fact"]))
    await first.get_entity("Alpha")
    first.close()

    second = service_factory(store, reference_store=references)
    result = await second.initialize()

    assert result.references_loaded == 1
    assert await second.get_entity("Alpha") == make_entity(observations=["T1 verified fact"])
    reference = second.catalog.references()[0]
    assert reference.access_count == 2
    assert second.cache.stats().misses == 1
    assert (tmp_path / "bodies" / "cortex" / "entities" / "alpha.json").exists()


@pytest.mark.asyncio
async def test_returned_entities_do_not_alias_the_cache(service):
    await service.initialize()
    await service.put_entity("Alpha", {"entityType": "Fact", "observations": ["o1"], "metadata": {"k": 1}})

    first = await service.get_entity("Alpha")
    first.metadata["k"] = 999

    assert (await service.get_entity("Alpha")).metadata == {"k": 1}


@pytest.mark.asyncio
async def test_put_entity_copies_caller_state(service):
    await service.initialize()
    metadata = {"k": 1}
    entity = Entity(name="Alpha", entity_type="Fact", observations=["o1"], metadata=metadata)

    await service.put_entity("Alpha", entity)
    metadata["k"] = 2
    entity.metadata["k"] = 3

    stored = await service.get_entity("Alpha")
    assert stored.metadata == {"k": 1}
    assert stored.observations == ("o1",)
