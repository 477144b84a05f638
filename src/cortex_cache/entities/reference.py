"""Lightweight reference domain entity."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Priority(str, Enum):
    """Catalog priority of an entity, highest first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric rank, 0 for critical up to 3 for low."""
        return list(Priority).index(self)


class QualityTag(str, Enum):
    """Evidence quality tier, T1 highest."""

    T1 = "T1"
    T2 = "T2"
    T3 = "T3"


@dataclass(frozen=True)
class LightweightReference:
    """Catalog entry pointing at a full entity body without holding it.

    Attributes:
        entity_name: Name of the referenced entity (1:1 with Entity.name)
        locator: Opaque backing-store address, only ever passed back to fetch()
        summary: First observation, truncated to 100 characters
        priority: Derived catalog priority
        size_estimate: Human-scaled byte count of the full body ("512B", "2.1KB")
        quality_tag: Best evidence tier found in the observations
        created_at: When the reference was first created
        last_accessed_at: Last catalog lookup (or creation time)
        access_count: Number of catalog lookups
    """

    entity_name: str
    locator: str
    summary: str
    priority: Priority
    size_estimate: str
    quality_tag: QualityTag
    created_at: datetime
    last_accessed_at: datetime
    access_count: int = 0
