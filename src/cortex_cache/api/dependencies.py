"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from cortex_cache.config import get_settings
from cortex_cache.handlers import EntityHandler
from cortex_cache.repositories import JsonFileReferenceStore, create_entity_store
from cortex_cache.services import TieredMemoryService

logger = logging.getLogger(__name__)


def get_tiered_service(request: Request) -> TieredMemoryService:
    """Dependency injection for TieredMemoryService from app.state.

    Raises:
        RuntimeError: If service is not initialized
    """
    service = getattr(request.app.state, "tiered_service", None)
    if service is None:
        raise RuntimeError("TieredMemoryService not initialized. Check lifespan setup.")
    return service


def get_handler(request: Request) -> EntityHandler:
    """Dependency injection for EntityHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "entity_handler", None)
    if handler is None:
        raise RuntimeError("EntityHandler not initialized. Check lifespan setup.")
    return handler


def build_service() -> TieredMemoryService:
    """Wire a TieredMemoryService from settings."""
    settings = get_settings()
    return TieredMemoryService.create(
        entity_store=create_entity_store(settings),
        reference_store=JsonFileReferenceStore.create(settings.catalog_path),
        cache_size=settings.cache_size,
        base_path=settings.base_path,
        compression=settings.compression,
        avg_entity_bytes=settings.avg_entity_bytes,
    )


def make_lifespan(service: TieredMemoryService | None = None):
    """Build a lifespan context manager around ``service`` (or one built from settings).

    Startup initializes the service and stores it, with its handler, in
    app.state. Shutdown flushes the catalog, closes the store if it has a
    close() coroutine, and removes everything from app.state.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tiered_service = service or build_service()
        result = await tiered_service.initialize()

        app.state.tiered_service = tiered_service
        app.state.entity_handler = EntityHandler(service=tiered_service)
        logger.info(
            "Cortex cache ready: %d references, cache capacity %d",
            result.references_loaded,
            tiered_service.cache.capacity,
        )

        yield

        tiered_service.close()
        close = getattr(tiered_service.backing_store.store, "close", None)
        if close is not None:
            await close()

        del app.state.entity_handler
        del app.state.tiered_service
        logger.info("Cortex cache shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[EntityHandler, Depends(get_handler)]
ServiceDep = Annotated[TieredMemoryService, Depends(get_tiered_service)]
