#!/usr/bin/env python3
"""
Demo script for cortex cache.

This script stores a handful of knowledge entities, reads them back
through the tiered memory service and shows how the catalog, the bounded
cache and the backing store share the work.
"""

import asyncio
import tempfile
from pathlib import Path

from cortex_cache.errors import BodyNotFoundError, EntityNotFoundError
from cortex_cache.repositories import FileEntityRepository, JsonFileReferenceStore
from cortex_cache.services import TieredMemoryService

SAMPLE_ENTITIES = {
    "Cortex Access-Protocol v3.0": {
        "entityType": "System_Bootstrap_Protocol",
        "observations": ["Load the catalog first, bodies only on demand", "T1 verified by boot tests"],
    },
    "Redis": {
        "entityType": "Technology",
        "observations": [f"Redis observation {i}" for i in range(12)],
    },
    "Alice": {
        "entityType": "Person",
        "observations": ["Maintains the entity store", "T2 mentioned in meeting notes"],
        "metadata": {"team": "memory"},
    },
    "Release Plan": {
        "entityType": "Project",
        "observations": [f"Milestone {i} planned" for i in range(7)],
    },
}


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def build_service(root: Path, cache_size: int) -> TieredMemoryService:
    return TieredMemoryService.create(
        entity_store=FileEntityRepository.create(root / "bodies"),
        reference_store=JsonFileReferenceStore.create(root / "catalog.json"),
        cache_size=cache_size,
    )


async def demo_write_and_read(root: Path) -> None:
    """Demonstrate the write path and cached reads."""
    print_section("Write and Read")

    service = build_service(root, cache_size=2)
    result = await service.initialize()
    print(f"\n🚀 Initialized with {result.references_loaded} references")

    print("\n📝 Storing sample entities...")
    for name, body in SAMPLE_ENTITIES.items():
        persisted = await service.put_entity(name, body)
        print(f"  ✓ {name} -> {persisted.locator} ({persisted.size_bytes}B, x{persisted.compression_ratio})")

    print("\n📇 Catalog references:")
    for reference in service.catalog.references():
        print(
            f"  {reference.entity_name:<30} {reference.priority.value:<9} "
            f"{reference.quality_tag.value} {reference.size_estimate:>7}  {reference.summary[:30]}"
        )

    print("\n🔍 Reading entities back (cache holds 2):")
    for name in SAMPLE_ENTITIES:
        before = service.cache.stats().hits
        entity = await service.get_entity(name)
        source = "cache" if service.cache.stats().hits > before else "backing store"
        print(f"  {entity.name:<30} {len(entity.observations):>2} observations from {source}")

    try:
        await service.get_entity("Nobody")
    except EntityNotFoundError as e:
        print(f"\n  ✗ {e}")

    service.close()


async def demo_restart(root: Path) -> None:
    """Demonstrate catalog persistence across restarts."""
    print_section("Restart")

    service = build_service(root, cache_size=2)
    result = await service.initialize()
    print(f"\n🔄 Reloaded {result.references_loaded} references in {result.initialization_time_ms:.1f}ms")

    entity = await service.get_entity("Alice")
    print(f"  Alice loaded lazily: {entity.observations[0]!r}, metadata={entity.metadata}")

    reference = next(ref for ref in service.catalog.references() if ref.entity_name == "Alice")
    print(f"  Access count carried over: {reference.access_count}")

    print("\n⚠️  Colliding names share a locator:")
    await service.put_entity("Foo Bar", {"entityType": "Fact", "observations": ["first"]})
    await service.put_entity("foo_bar", {"entityType": "Fact", "observations": ["second"]})
    await service.put_entity("Filler", {"entityType": "Fact", "observations": []})
    try:
        await service.get_entity("Foo Bar")
    except BodyNotFoundError as e:
        print(f"  ✗ {e}")

    print("\n📊 Metrics:")
    metrics = service.get_metrics()
    print(f"  Catalog: {metrics.catalog.reference_count} refs, {metrics.catalog.footprint_bytes}B")
    print(f"  Estimated full size: {metrics.estimated_full_bytes}B")
    print(f"  Memory reduction: {metrics.memory_reduction_percent}% (x{metrics.compression_ratio})")
    print(f"  Cache hit rate: {metrics.cache.hit_rate:.2%}")
    print(
        f"  Backing store: {metrics.backing_store.successful_requests} ok, "
        f"{metrics.backing_store.failed_requests} failed, "
        f"avg {metrics.backing_store.average_response_time_ms:.2f}ms"
    )

    service.close()


async def run() -> None:
    with tempfile.TemporaryDirectory(prefix="cortex-demo-") as tmp:
        root = Path(tmp)
        await demo_write_and_read(root)
        await demo_restart(root)


def main() -> None:
    """Run all demos."""
    print("\n🚀 Cortex Cache Demo")
    print("=" * 70)
    print("Lightweight references in memory, full entities loaded on demand")

    asyncio.run(run())

    print("\n" + "=" * 70)
    print("✅ Demo completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
