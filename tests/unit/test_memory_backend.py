"""Unit tests for the in-process index backend."""

from __future__ import annotations

import pytest

from osm_geocoder.backends.base import IndexPushError
from osm_geocoder.backends.memory import InMemoryBackend
from osm_geocoder.core.config import ImporterConfig
from osm_geocoder.core.constants import DATASET_JUNCTIONS, DATASET_NODES, DATASET_WAYS
from osm_geocoder.models.documents import (
    GeoLocation,
    JunctionDocument,
    NodeDocument,
    WayDocument,
)

HERE = GeoLocation(lat=42.87, lon=74.59)


def node(doc_id: str, name: str) -> NodeDocument:
    return NodeDocument(id=doc_id, name=name, location=HERE)


class TestLifecycle:
    def test_push_requires_indices(self, config: ImporterConfig) -> None:
        backend = InMemoryBackend(config)
        with pytest.raises(IndexPushError) as exc_info:
            backend.push_nodes([node("1", "Osh Bazaar")])
        assert exc_info.value.dataset == DATASET_NODES
        assert exc_info.value.retryable is False

    def test_update_indices_is_idempotent(self, memory_backend: InMemoryBackend) -> None:
        memory_backend.push_nodes([node("1", "Osh Bazaar")])
        memory_backend.update_indices()
        assert len(memory_backend.documents(DATASET_NODES)) == 1

    def test_push_returns_count(self, memory_backend: InMemoryBackend) -> None:
        assert memory_backend.push_nodes([node("1", "A"), node("2", "B")]) == 2
        assert memory_backend.push_ways([]) == 0

    def test_same_id_overwrites(self, memory_backend: InMemoryBackend) -> None:
        memory_backend.push_nodes([node("1", "Old")])
        memory_backend.push_nodes([node("1", "New")])
        assert [d.name for d in memory_backend.documents(DATASET_NODES)] == ["New"]

    def test_delete_indices(self, memory_backend: InMemoryBackend) -> None:
        memory_backend.push_nodes([node("1", "A")])
        memory_backend.delete_indices()
        assert memory_backend.documents(DATASET_NODES) == []
        with pytest.raises(IndexPushError):
            memory_backend.push_nodes([node("1", "A")])


class TestSearch:
    @pytest.fixture()
    def loaded(self, memory_backend: InMemoryBackend) -> InMemoryBackend:
        memory_backend.push_nodes(
            [
                node("1", "Osh Bazaar"),
                node("2", "Dordoi Bazaar"),
                node("3", "Bazaar"),
                node("4", "Bazaar Street"),
            ]
        )
        memory_backend.push_ways(
            [WayDocument(id="10", name="Chui Avenue", location=HERE, node_count=3)]
        )
        memory_backend.push_junctions(
            [
                JunctionDocument(
                    id="20",
                    name="Chui Avenue & Manas Avenue",
                    street_names=["Chui Avenue", "Manas Avenue"],
                    location=HERE,
                )
            ]
        )
        return memory_backend

    def test_ranking_exact_prefix_substring(self, loaded: InMemoryBackend) -> None:
        hits = loaded.search("bazaar", size=10)
        assert [(h.id, h.score) for h in hits] == [
            ("3", 3.0),
            ("4", 2.0),
            ("1", 1.0),
            ("2", 1.0),
        ]

    def test_ties_break_on_dataset_then_id(self, loaded: InMemoryBackend) -> None:
        hits = loaded.search("Chui Avenue", size=10)
        assert [(h.dataset, h.id) for h in hits] == [(DATASET_JUNCTIONS, "20"), (DATASET_WAYS, "10")]

    def test_street_names_are_searchable(self, loaded: InMemoryBackend) -> None:
        hits = loaded.search("manas", size=10)
        assert [h.id for h in hits] == ["20"]
        assert hits[0].street_names == ["Chui Avenue", "Manas Avenue"]

    def test_size_limits_hits(self, loaded: InMemoryBackend) -> None:
        assert len(loaded.search("bazaar", size=2)) == 2

    def test_no_match(self, loaded: InMemoryBackend) -> None:
        assert loaded.search("Karakol", size=10) == []
