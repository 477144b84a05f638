"""Durable reference storage protocol."""

from typing import Protocol, runtime_checkable

from cortex_cache.entities import LightweightReference


@runtime_checkable
class ReferenceStore(Protocol):
    """Protocol for persisting the reference catalog between runs."""

    def load(self) -> list[LightweightReference] | None:
        """Load persisted references.

        Returns:
            The references, or None if nothing has been persisted yet

        Raises:
            InitializationError: If the store exists but cannot be parsed
        """
        ...

    def save(self, references: list[LightweightReference]) -> None:
        """Replace the persisted references.

        Args:
            references: Every reference currently held by the catalog
        """
        ...
