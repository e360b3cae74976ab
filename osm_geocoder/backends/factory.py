"""Backend factory — selects the active index backend by name.

The factory maintains a registry of known backends. New backends are
registered by adding an entry to ``_BACKEND_REGISTRY`` or by calling
``register_backend``.

Usage::

    from osm_geocoder.backends.factory import get_backend

    backend = get_backend("elasticsearch", config)
    backend.update_indices()

The backend name is read from the ``INDEX_BACKEND`` environment variable
via ``ImporterConfig.index_backend``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from osm_geocoder.backends.base import IndexBackend, IndexBackendError

if TYPE_CHECKING:
    from collections.abc import Callable

    from osm_geocoder.core.config import ImporterConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Backend name constants
# ---------------------------------------------------------------------------

ELASTICSEARCH = "elasticsearch"
MEMORY = "memory"

# ---------------------------------------------------------------------------
# Lazy-import backend registry
# ---------------------------------------------------------------------------

# Each entry maps a backend name to a callable that returns the backend
# *class*, so the Elasticsearch client is only imported when selected.

_BACKEND_REGISTRY: dict[str, Callable[[], type[IndexBackend]]] = {}


def _register_builtin_backends() -> None:
    """Register the built-in backends (lazy import thunks)."""

    def _elasticsearch() -> type[IndexBackend]:
        from osm_geocoder.backends.elastic import ElasticsearchBackend

        return ElasticsearchBackend

    def _memory() -> type[IndexBackend]:
        from osm_geocoder.backends.memory import InMemoryBackend

        return InMemoryBackend

    _BACKEND_REGISTRY[ELASTICSEARCH] = _elasticsearch
    _BACKEND_REGISTRY[MEMORY] = _memory


def _ensure_registry() -> None:
    """Initialise the backend registry once (idempotent)."""
    if not _BACKEND_REGISTRY:
        _register_builtin_backends()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_backend(
    name: str,
    loader: Callable[[], type[IndexBackend]],
) -> None:
    """Register a custom backend.

    Args:
        name: Backend name (e.g. ``"opensearch"``).
        loader: A zero-argument callable that returns the backend class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Backend name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _BACKEND_REGISTRY[name] = loader
    logger.debug("Registered index backend: %s", name)


def get_backend(name: str, config: ImporterConfig) -> IndexBackend:
    """Create and return an index backend instance.

    Args:
        name: Backend identifier (e.g. ``"elasticsearch"``, ``"memory"``).
        config: Importer configuration handed to the backend.

    Raises:
        IndexBackendError: If the named backend is not registered.
    """
    _ensure_registry()

    loader = _BACKEND_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(sorted(_BACKEND_REGISTRY))
        msg = f"Unknown index backend: {name!r}. Available: {available}"
        raise IndexBackendError(backend=name, message=msg)

    backend_cls = loader()
    logger.info("Creating index backend: %s", name)
    return backend_cls(config)


def list_backends() -> list[str]:
    """Return the names of all registered backends."""
    _ensure_registry()
    return sorted(_BACKEND_REGISTRY)
