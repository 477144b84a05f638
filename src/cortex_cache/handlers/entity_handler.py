"""HTTP handlers for entity operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging

from fastapi import HTTPException, status

from cortex_cache.dto import (
    EntityResponse,
    HealthCheckResponse,
    PutEntityRequest,
    PutEntityResponse,
)
from cortex_cache.errors import (
    BackingStoreConnectionError,
    BodyNotFoundError,
    CortexError,
    EntityNotFoundError,
    EntityValidationError,
    InitializationError,
    StorageError,
)
from cortex_cache.services import TieredMemoryService

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    EntityNotFoundError: status.HTTP_404_NOT_FOUND,
    BodyNotFoundError: status.HTTP_409_CONFLICT,
    EntityValidationError: 422,
    BackingStoreConnectionError: status.HTTP_503_SERVICE_UNAVAILABLE,
    InitializationError: status.HTTP_503_SERVICE_UNAVAILABLE,
    StorageError: status.HTTP_502_BAD_GATEWAY,
}


def to_http_exception(error: CortexError) -> HTTPException:
    """Map a CortexError to an HTTPException carrying its context."""
    status_code = ERROR_STATUS.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": error.message, **error.context},
    )


class EntityHandler:
    """HTTP handlers for entity operations.

    This handler delegates business logic to TieredMemoryService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses

    Example:
        ```python
        handler = EntityHandler(service=service)

        @app.get("/entities/{name}", response_model=EntityResponse)
        async def get_entity(name: str):
            return await handler.get_entity(name)
        ```
    """

    def __init__(self, service: TieredMemoryService) -> None:
        """Initialize the entity handler.

        Args:
            service: The tiered memory service for business logic (required).
        """
        self._service = service

    async def get_entity(self, name: str) -> EntityResponse:
        """Handle GET /entities/{name} requests.

        Raises:
            HTTPException: 404 for unknown names, 409 on catalog/store divergence
        """
        try:
            entity = await self._service.get_entity(name)
        except CortexError as e:
            logger.warning("GET %s failed: %s", name, e)
            raise to_http_exception(e) from e

        return EntityResponse(
            name=entity.name,
            entity_type=entity.entity_type,
            observations=list(entity.observations),
            metadata=entity.metadata,
        )

    async def put_entity(self, name: str, request: PutEntityRequest) -> PutEntityResponse:
        """Handle PUT /entities/{name} requests.

        Raises:
            HTTPException: 422 for malformed entities, 502/503 on backing store failures
        """
        try:
            result = await self._service.put_entity(name, request.to_payload())
        except CortexError as e:
            logger.warning("PUT %s failed: %s", name, e)
            raise to_http_exception(e) from e

        return PutEntityResponse(
            success=True,
            locator=result.locator,
            size_bytes=result.size_bytes,
            stored_bytes=result.stored_bytes,
            compression_ratio=result.compression_ratio,
            message="Entity stored successfully",
        )

    async def get_metrics(self) -> dict:
        """Handle GET /metrics requests."""
        return self._service.get_metrics().to_dict()

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        store_healthy = await self._service.backing_store.ping()
        healthy = self._service.initialized and store_healthy

        return HealthCheckResponse(
            status="healthy" if healthy else "unhealthy",
            initialized=self._service.initialized,
            backing_store_healthy=store_healthy,
        )
