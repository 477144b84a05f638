"""Filesystem implementation of EntityStore.

Locators are relative paths under a root directory, mirroring the
``cortex/entities/<name>.json`` layout of a git-backed entity store.
Blocking file I/O runs in a worker thread so the event loop only
suspends on reads and writes.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from cortex_cache.config import get_settings
from cortex_cache.errors import StorageError

logger = logging.getLogger(__name__)


class FileEntityRepository:
    """Directory-tree implementation of the EntityStore protocol."""

    def __init__(self, root: Path | str | None = None) -> None:
        """Initialize the file repository.

        Args:
            root: Directory holding the bodies. Defaults to settings.data_dir.
        """
        self._root = Path(root or get_settings().data_dir).resolve()

    @classmethod
    def create(cls, root: Path | str | None = None) -> "FileEntityRepository":
        """Factory method to create FileEntityRepository with defaults."""
        return cls(root=root)

    def _path(self, locator: str) -> Path:
        path = (self._root / locator).resolve()
        if not path.is_relative_to(self._root):
            raise StorageError("Locator escapes the store root", locator=locator)
        return path

    def _ensure_root(self) -> bool:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create store root %s: %s", self._root, e)
            return False
        return os.access(self._root, os.R_OK | os.W_OK)

    async def ping(self) -> bool:
        return await asyncio.to_thread(self._ensure_root)

    async def read(self, locator: str) -> bytes | None:
        path = self._path(locator)

        def _read() -> bytes | None:
            try:
                return path.read_bytes()
            except FileNotFoundError:
                return None

        try:
            return await asyncio.to_thread(_read)
        except OSError as e:
            raise StorageError(f"File read failed: {e}", locator=locator, operation="read") from e

    async def write(self, locator: str, payload: bytes) -> None:
        path = self._path(locator)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file, then swap it in atomically
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"File write failed: {e}", locator=locator, operation="write") from e

    def describe(self) -> dict:
        return {"backend": "file", "root": str(self._root)}

    @property
    def root(self) -> Path:
        return self._root
