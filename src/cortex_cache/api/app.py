"""FastAPI application exposing the tiered memory service."""

from typing import Any

from fastapi import FastAPI

from cortex_cache import __version__
from cortex_cache.api.dependencies import HandlerDep, make_lifespan
from cortex_cache.config import configure_logging, get_settings
from cortex_cache.dto import EntityResponse, HealthCheckResponse, PutEntityRequest, PutEntityResponse
from cortex_cache.services import TieredMemoryService


def create_app(service: TieredMemoryService | None = None) -> FastAPI:
    """Create the API application.

    Args:
        service: Service to expose. If None, one is built from settings at startup.

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Cortex Cache API",
        description="Tiered entity memory: lightweight reference catalog over a lazily loaded backing store",
        version=__version__,
        lifespan=make_lifespan(service),
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Cortex Cache API",
            "version": __version__,
            "endpoints": {
                "entities": "/entities/{name}",
                "metrics": "/metrics",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/entities/{name}", response_model=EntityResponse)
    async def get_entity(name: str, handler: HandlerDep) -> EntityResponse:
        """Return the full entity, loading it from the backing store on a cache miss."""
        return await handler.get_entity(name)

    @app.put("/entities/{name}", response_model=PutEntityResponse)
    async def put_entity(name: str, request: PutEntityRequest, handler: HandlerDep) -> PutEntityResponse:
        """Persist an entity and register its lightweight reference."""
        return await handler.put_entity(name, request)

    @app.get("/metrics", response_model=dict[str, Any])
    async def get_metrics(handler: HandlerDep) -> dict[str, Any]:
        """Catalog, backing store, cache and access statistics."""
        return await handler.get_metrics()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "cortex_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
