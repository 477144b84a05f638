"""Knowledge entity domain entity."""

from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class Entity:
    """A full knowledge entity body.

    This is the value held by the backing store and the bounded cache.
    The catalog only ever keeps a LightweightReference to it.

    Attributes:
        name: Unique key of the entity
        entity_type: Free-form type tag (e.g. "Fact", "System_Bootstrap_Protocol")
        observations: Ordered observation strings, possibly empty
        metadata: Optional free-form extension map
    """

    name: str
    entity_type: str
    observations: tuple[str, ...] = ()
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "observations", tuple(self.observations))
        if self.metadata is not None:
            object.__setattr__(self, "metadata", deepcopy(self.metadata))

    def copy(self) -> "Entity":
        """Return an equal entity that shares no mutable state with this one."""
        return replace(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entity":
        """Build an entity from its wire mapping (``entityType`` key)."""
        return cls(
            name=data["name"],
            entity_type=data["entityType"],
            observations=tuple(data["observations"]),
            metadata=data.get("metadata"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire mapping of this entity."""
        data: dict[str, Any] = {
            "name": self.name,
            "entityType": self.entity_type,
            "observations": list(self.observations),
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data
