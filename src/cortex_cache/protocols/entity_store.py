"""Entity body storage protocol.

Defines the interface of the backing collaborator that holds full entity
bodies. It deals in opaque bytes addressed by locator; encoding, compression
and shape validation are the BackingStoreClient's job.

Implementations can include:
- A directory tree on disk (default)
- Redis
- An in-process dict
- A version-controlled file store reached over the network
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EntityStore(Protocol):
    """Protocol for entity body storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from cortex_cache.protocols import EntityStore

        store: EntityStore = FileEntityRepository(Path("./data"))
        store: EntityStore = RedisEntityRepository.create()
        ```
    """

    async def ping(self) -> bool:
        """Check whether the store is reachable.

        Returns:
            True if reachable, False otherwise
        """
        ...

    async def read(self, locator: str) -> bytes | None:
        """Read the payload stored at a locator.

        Args:
            locator: Path-like address produced by the BackingStoreClient

        Returns:
            The stored bytes, or None if nothing is stored there
        """
        ...

    async def write(self, locator: str, payload: bytes) -> None:
        """Write (or overwrite) the payload at a locator.

        Args:
            locator: Path-like address produced by the BackingStoreClient
            payload: Encoded body
        """
        ...

    def describe(self) -> dict:
        """Describe the store for diagnostics.

        Returns:
            Dictionary with implementation-specific details
        """
        ...
