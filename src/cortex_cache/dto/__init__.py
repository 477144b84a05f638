"""Data Transfer Objects and storage documents.

These Pydantic models define the external contracts: the HTTP API
(requests/responses) and the persisted shapes (documents).

Internal domain logic should use entities from the entities package.
"""

from .documents import (
    CatalogDocument,
    EntityDocument,
    ReferenceDocument,
    StoredEntityDocument,
)
from .requests import PutEntityRequest
from .responses import EntityResponse, HealthCheckResponse, PutEntityResponse

__all__ = [
    "CatalogDocument",
    "EntityDocument",
    "ReferenceDocument",
    "StoredEntityDocument",
    "PutEntityRequest",
    "EntityResponse",
    "PutEntityResponse",
    "HealthCheckResponse",
]
