"""Storage documents: the on-disk / on-the-wire shapes.

These Pydantic models validate bodies coming back from the backing store
and the durable catalog, and serialize them on the way out. The entity
wire shape (``name``, ``entityType``, ``observations``, ``metadata``) must
round-trip through them unchanged.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cortex_cache.entities import Entity, LightweightReference, Priority, QualityTag

STORAGE_FORMAT_VERSION = "3.0.0"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EntityDocument(_CamelModel):
    """Minimal entity shape: non-empty name and entityType, observations present."""

    name: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    observations: list[str]
    metadata: dict[str, Any] | None = None

    @field_validator("name", "entity_type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def from_entity(cls, entity: Entity) -> "EntityDocument":
        return cls(
            name=entity.name,
            entity_type=entity.entity_type,
            observations=list(entity.observations),
            metadata=entity.metadata,
        )

    def to_entity(self) -> Entity:
        return Entity(
            name=self.name,
            entity_type=self.entity_type,
            observations=tuple(self.observations),
            metadata=self.metadata,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StoredEntityDocument(_CamelModel):
    """Envelope written to the backing store around an entity body."""

    entity: EntityDocument
    stored_at: datetime
    version: str = STORAGE_FORMAT_VERSION
    compression: str = "none"


class ReferenceDocument(_CamelModel):
    """Serialized form of a LightweightReference."""

    entity_name: str = Field(..., min_length=1)
    locator: str = Field(..., min_length=1)
    summary: str
    priority: Priority
    size_estimate: str
    quality_tag: QualityTag
    created_at: datetime
    last_accessed_at: datetime
    access_count: int = Field(0, ge=0)

    @classmethod
    def from_reference(cls, reference: LightweightReference) -> "ReferenceDocument":
        return cls(
            entity_name=reference.entity_name,
            locator=reference.locator,
            summary=reference.summary,
            priority=reference.priority,
            size_estimate=reference.size_estimate,
            quality_tag=reference.quality_tag,
            created_at=reference.created_at,
            last_accessed_at=reference.last_accessed_at,
            access_count=reference.access_count,
        )

    def to_reference(self) -> LightweightReference:
        return LightweightReference(
            entity_name=self.entity_name,
            locator=self.locator,
            summary=self.summary,
            priority=self.priority,
            size_estimate=self.size_estimate,
            quality_tag=self.quality_tag,
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
            access_count=self.access_count,
        )


class CatalogDocument(_CamelModel):
    """Durable catalog file contents."""

    version: str = STORAGE_FORMAT_VERSION
    saved_at: datetime
    references: list[ReferenceDocument] = Field(default_factory=list)
