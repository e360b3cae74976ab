"""Tests for the index backend factory.

Covers: get_backend, list_backends, register_backend, error handling,
lazy import behaviour and config-driven switching.
"""

from __future__ import annotations

import unittest

from osm_geocoder.backends.base import IndexBackend, IndexBackendError
from osm_geocoder.backends.factory import (
    _BACKEND_REGISTRY,
    ELASTICSEARCH,
    MEMORY,
    _ensure_registry,
    get_backend,
    list_backends,
    register_backend,
)
from osm_geocoder.backends.memory import InMemoryBackend
from osm_geocoder.core.config import ImporterConfig

CONFIG = ImporterConfig(index_backend=MEMORY)


class TestListBackends(unittest.TestCase):
    """list_backends returns the built-in backends."""

    def test_includes_builtin_backends(self) -> None:
        backends = list_backends()
        assert ELASTICSEARCH in backends
        assert MEMORY in backends

    def test_returns_sorted(self) -> None:
        backends = list_backends()
        assert backends == sorted(backends)


class TestGetBackend(unittest.TestCase):
    """get_backend creates the correct backend instance."""

    def test_memory(self) -> None:
        backend = get_backend(MEMORY, CONFIG)
        assert isinstance(backend, InMemoryBackend)
        assert backend.name == MEMORY
        assert backend.config is CONFIG

    def test_elasticsearch_does_not_connect_on_creation(self) -> None:
        from osm_geocoder.backends.elastic import ElasticsearchBackend

        backend = get_backend(ELASTICSEARCH, CONFIG)
        assert isinstance(backend, ElasticsearchBackend)
        assert backend.name == ELASTICSEARCH

    def test_unknown_backend_raises(self) -> None:
        with self.assertRaises(IndexBackendError) as ctx:
            get_backend("nonexistent_backend", CONFIG)
        assert "nonexistent_backend" in str(ctx.exception)
        assert "Available:" in str(ctx.exception)
        assert ctx.exception.backend == "nonexistent_backend"


class TestRegisterBackend(unittest.TestCase):
    """register_backend adds custom backends."""

    def setUp(self) -> None:
        _ensure_registry()
        _BACKEND_REGISTRY.pop("test_custom", None)

    def tearDown(self) -> None:
        _BACKEND_REGISTRY.pop("test_custom", None)

    def test_register_and_get(self) -> None:
        class _TestBackend(IndexBackend):
            name = "test_custom"

            def update_indices(self):  # type: ignore[override]
                return None

            def bulk_push(self, dataset, documents):  # type: ignore[override]
                return len(documents)

            def delete_indices(self):  # type: ignore[override]
                return None

            def search(self, query, size):  # type: ignore[override]
                return []

        register_backend("test_custom", lambda: _TestBackend)
        assert "test_custom" in list_backends()

        backend = get_backend("test_custom", CONFIG)
        assert isinstance(backend, _TestBackend)
        assert backend.push_nodes([]) == 0

    def test_register_empty_name_raises(self) -> None:
        with self.assertRaises(ValueError):
            register_backend("", lambda: InMemoryBackend)

    def test_builtins_survive_custom_registration(self) -> None:
        register_backend("test_custom", lambda: InMemoryBackend)
        assert MEMORY in list_backends()
