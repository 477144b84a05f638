"""Access record domain entity."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FrequencyClass(str, Enum):
    """Recency bucket derived from the time since the previous access."""

    NEW = "new"
    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class AccessRecord:
    """Per-entity access history kept by the AccessTracker.

    Attributes:
        count: Number of recorded accesses
        last_access: Timestamp of the most recent access
        frequency_class: Bucket computed from the access before the most recent one
    """

    count: int
    last_access: datetime
    frequency_class: FrequencyClass
