"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PutEntityRequest(BaseModel):
    """Request DTO for storing an entity.

    The entity name comes from the URL path; the handler combines both
    into the wire mapping expected by the service layer.
    """

    model_config = ConfigDict(populate_by_name=True)

    entity_type: str = Field(..., alias="entityType", description="Entity type tag", min_length=1)
    observations: list[str] = Field(..., description="Ordered observation strings (may be empty)")
    metadata: dict[str, Any] | None = Field(
        None,
        description="Optional free-form metadata",
    )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "entityType": self.entity_type,
            "observations": self.observations,
        }
        if self.metadata is not None:
            payload["metadata"] = self.metadata
        return payload
