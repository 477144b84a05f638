"""Repository layer for data access.

This layer abstracts external dependencies (disk, Redis) behind
protocol-based interfaces. This enables:
- Easy swapping of implementations (files → Redis → in-memory)
- Unit testing with in-memory implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from cortex_cache.config import Settings, get_redis_client, get_settings
from cortex_cache.protocols import EntityStore, ReferenceStore

from .file_entity_repository import FileEntityRepository
from .json_reference_repository import JsonFileReferenceStore
from .memory_entity_repository import InMemoryEntityRepository
from .redis_entity_repository import RedisEntityRepository


def create_entity_store(settings: Settings | None = None) -> EntityStore:
    """Build the EntityStore selected by ``settings.backend``."""
    settings = settings or get_settings()
    if settings.backend == "redis":
        return RedisEntityRepository.create(
            redis_client=get_redis_client(settings),
            key_prefix=settings.key_prefix,
        )
    if settings.backend == "memory":
        return InMemoryEntityRepository()
    return FileEntityRepository.create(root=settings.data_dir)


__all__ = [
    "EntityStore",
    "ReferenceStore",
    "FileEntityRepository",
    "InMemoryEntityRepository",
    "JsonFileReferenceStore",
    "RedisEntityRepository",
    "create_entity_store",
]
