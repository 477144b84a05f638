"""Exception hierarchy for cortex_cache.

Every failure raised by the core carries enough context (entity name,
locator, operation) for a caller to log it or retry the whole operation.
None of the core's failure paths leave partial state behind, so retrying
is always safe.
"""

from typing import Any


class CortexError(Exception):
    """Base exception for all cortex_cache errors."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = {k: v for k, v in context.items() if v is not None}
        super().__init__(message)

    @property
    def entity_name(self) -> str | None:
        return self.context.get("entity_name")

    @property
    def locator(self) -> str | None:
        return self.context.get("locator")

    @property
    def operation(self) -> str | None:
        return self.context.get("operation")

    def __str__(self) -> str:
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({details})"
        return self.message


class InitializationError(CortexError):
    """Catalog or backing store unusable at startup, or core used before initialize()."""


class EntityNotFoundError(CortexError):
    """The entity name has no reference in the catalog."""


class BodyNotFoundError(CortexError):
    """The catalog holds a locator that the backing store cannot resolve.

    Signals divergence between the catalog and the backing store, as
    opposed to EntityNotFoundError which means the name was never stored.
    """


class EntityValidationError(CortexError):
    """An entity body does not have the minimal entity shape."""


class BackingStoreConnectionError(CortexError):
    """The backing store is unreachable or has not been connected."""


class StorageError(CortexError):
    """The backing store failed to read or write a body."""


__all__ = [
    "CortexError",
    "InitializationError",
    "EntityNotFoundError",
    "BodyNotFoundError",
    "EntityValidationError",
    "BackingStoreConnectionError",
    "StorageError",
]
