"""Result and statistics records returned by the services.

These are read snapshots: the owning component builds a new instance on
every call, so holding one never exposes the component's internal state.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CatalogSize:
    """Reference count and serialized footprint of the catalog."""

    reference_count: int
    footprint_bytes: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class AccessStats:
    """Aggregate access pattern statistics."""

    total_accesses: int
    unique_entities: int
    average_accesses: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CacheStats:
    """Bounded cache statistics."""

    size: int
    capacity: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, float | int]:
        data: dict[str, float | int] = asdict(self)
        data["hit_rate"] = self.hit_rate
        return data


@dataclass(frozen=True)
class RequestMetrics:
    """Backing store request accounting."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    average_response_time_ms: float = 0.0
    fetch_requests: int = 0
    fetch_successes: int = 0
    persist_requests: int = 0
    persist_successes: int = 0
    connection_latency_ms: float | None = None
    last_connection_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.last_connection_time is not None:
            data["last_connection_time"] = self.last_connection_time.isoformat()
        return data


@dataclass(frozen=True)
class PersistResult:
    """Outcome of a successful persist."""

    locator: str
    size_bytes: int
    stored_bytes: int
    compression_ratio: float
    response_time_ms: float


@dataclass(frozen=True)
class InitializationResult:
    """Outcome of TieredMemoryService.initialize()."""

    status: str
    references_loaded: int
    initialization_time_ms: float
    connection_latency_ms: float | None


@dataclass(frozen=True)
class HealthSnapshot:
    """Point-in-time view across all components."""

    catalog: CatalogSize
    backing_store: RequestMetrics
    cache: CacheStats
    access: AccessStats
    estimated_full_bytes: int
    memory_reduction_percent: int
    compression_ratio: float
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert snapshot to a JSON-ready dictionary."""
        return {
            "catalog": self.catalog.to_dict(),
            "backing_store": self.backing_store.to_dict(),
            "cache": self.cache.to_dict(),
            "access": self.access.to_dict(),
            "estimated_full_bytes": self.estimated_full_bytes,
            "memory_reduction_percent": self.memory_reduction_percent,
            "compression_ratio": self.compression_ratio,
            "timestamp": self.timestamp.isoformat(),
        }
