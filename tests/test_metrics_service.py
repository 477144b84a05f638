"""
Tests for the metrics aggregator.
"""

import pytest

from cortex_cache.services.metrics_service import MetricsAggregator, derive_reduction


def test_derive_reduction():
    assert derive_reduction(500, 5000) == (90, 10.0)
    assert derive_reduction(300, 10000) == (97, 33.3)


def test_derive_reduction_empty_catalog():
    assert derive_reduction(0, 0) == (0, 0.0)


@pytest.mark.asyncio
async def test_empty_snapshot(service, clock):
    snapshot = service.get_metrics()

    assert snapshot.catalog.reference_count == 0
    assert snapshot.estimated_full_bytes == 0
    assert snapshot.memory_reduction_percent == 0
    assert snapshot.compression_ratio == 0.0
    assert snapshot.timestamp == clock.now


@pytest.mark.asyncio
async def test_snapshot_is_derived_from_components(service, make_entity):
    await service.initialize()
    await service.put_entity("Alpha", make_entity())
    await service.put_entity("Beta", make_entity(name="Beta"))

    snapshot = service.get_metrics()
    footprint = service.catalog.size().footprint_bytes

    assert snapshot.catalog.reference_count == 2
    assert snapshot.catalog.footprint_bytes == footprint
    assert snapshot.estimated_full_bytes == 2 * 5000
    assert (snapshot.memory_reduction_percent, snapshot.compression_ratio) == derive_reduction(
        footprint, 10000
    )
    assert snapshot.backing_store.persist_successes == 2
    assert snapshot.cache.size == 2


@pytest.mark.asyncio
async def test_snapshot_is_deterministic(service, clock, make_entity):
    await service.initialize()
    await service.put_entity("Alpha", make_entity())

    aggregator = MetricsAggregator(
        catalog=service.catalog,
        backing_store=service.backing_store,
        cache=service.cache,
        access_tracker=service.access_tracker,
        avg_entity_bytes=2000,
        clock=clock,
    )
    assert aggregator.snapshot() == aggregator.snapshot()
    assert aggregator.snapshot().estimated_full_bytes == 2000


def test_to_dict_is_json_ready(service):
    data = service.get_metrics().to_dict()

    assert set(data) == {
        "catalog",
        "backing_store",
        "cache",
        "access",
        "estimated_full_bytes",
        "memory_reduction_percent",
        "compression_ratio",
        "timestamp",
    }
    assert isinstance(data["timestamp"], str)
    assert data["cache"]["capacity"] == 3
