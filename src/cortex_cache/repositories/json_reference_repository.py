"""JSON-file implementation of ReferenceStore."""

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from cortex_cache.config import get_settings
from cortex_cache.dto import CatalogDocument, ReferenceDocument
from cortex_cache.entities import LightweightReference
from cortex_cache.errors import InitializationError

logger = logging.getLogger(__name__)


class JsonFileReferenceStore:
    """Persists the reference catalog as a single versioned JSON document."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path or get_settings().catalog_path)

    @classmethod
    def create(cls, path: Path | str | None = None) -> "JsonFileReferenceStore":
        """Factory method to create JsonFileReferenceStore with defaults."""
        return cls(path=path)

    def load(self) -> list[LightweightReference] | None:
        if not self._path.exists():
            logger.info("No persisted catalog at %s, starting empty", self._path)
            return None

        try:
            document = CatalogDocument.model_validate_json(self._path.read_bytes())
        except (OSError, ValidationError) as e:
            raise InitializationError(
                f"Reference catalog at {self._path} is unreadable: {e}",
                operation="load",
            ) from e

        return [doc.to_reference() for doc in document.references]

    def save(self, references: list[LightweightReference]) -> None:
        document = CatalogDocument(
            saved_at=datetime.now(timezone.utc),
            references=[ReferenceDocument.from_reference(ref) for ref in references],
        )
        payload = document.model_dump_json(by_alias=True, indent=2)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved %d references to %s", len(references), self._path)

    @property
    def path(self) -> Path:
        return self._path
