"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntityResponse(BaseModel):
    """Response DTO for a single entity."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Entity name")
    entity_type: str = Field(..., alias="entityType", description="Entity type tag")
    observations: list[str] = Field(default_factory=list, description="Ordered observations")
    metadata: dict[str, Any] | None = Field(None, description="Free-form metadata")


class PutEntityResponse(BaseModel):
    """Response DTO for entity store operation."""

    success: bool = Field(..., description="Whether the operation succeeded")
    locator: str = Field(..., description="Backing store locator of the body")
    size_bytes: int = Field(..., description="Serialized size of the entity", ge=0)
    stored_bytes: int = Field(..., description="Bytes written to the backing store", ge=0)
    compression_ratio: float = Field(..., description="size_bytes / stored_bytes", ge=0.0)
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    initialized: bool = Field(..., description="Whether the service completed initialize()")
    backing_store_healthy: bool = Field(..., description="Whether the backing store is reachable")
