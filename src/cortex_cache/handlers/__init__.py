"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .entity_handler import EntityHandler, to_http_exception

__all__ = [
    "EntityHandler",
    "to_http_exception",
]
