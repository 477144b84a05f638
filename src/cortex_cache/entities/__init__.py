"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for wire formats - use the
documents and DTOs from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .access_record import AccessRecord, FrequencyClass
from .entity import Entity
from .reference import LightweightReference, Priority, QualityTag

__all__ = [
    "AccessRecord",
    "Entity",
    "FrequencyClass",
    "LightweightReference",
    "Priority",
    "QualityTag",
]
