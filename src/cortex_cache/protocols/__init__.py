"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (files → Redis → anything else)
- Unit testing with in-memory implementations
- Clear separation of concerns

Usage:
    ```python
    from cortex_cache.protocols import EntityStore, ReferenceStore

    # Type hints work with any implementation
    store: EntityStore = FileEntityRepository(root)    # works
    store: EntityStore = RedisEntityRepository.create()  # also works
    ```
"""

from .entity_store import EntityStore
from .reference_store import ReferenceStore

__all__ = [
    "EntityStore",
    "ReferenceStore",
]
