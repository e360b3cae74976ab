"""Index backend abstraction layer.

Exports the ``IndexBackend`` ABC, the backend exception hierarchy and the
factory used to select a backend by name.
"""

from osm_geocoder.backends.base import (
    IndexBackend,
    IndexBackendError,
    IndexPushError,
    IndexSchemaError,
    IndexSearchError,
)
from osm_geocoder.backends.factory import get_backend, list_backends, register_backend

__all__ = [
    "IndexBackend",
    "IndexBackendError",
    "IndexPushError",
    "IndexSchemaError",
    "IndexSearchError",
    "get_backend",
    "list_backends",
    "register_backend",
]
