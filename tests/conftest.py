"""Shared pytest fixtures for the OSM Geocoder test suite."""

from __future__ import annotations

import pytest

from osm_geocoder.activities.accumulate import Accumulator, OsmExtract
from osm_geocoder.backends.memory import InMemoryBackend
from osm_geocoder.core.config import ImporterConfig
from osm_geocoder.models.osm import Member, MemberType, Node, Relation, Way

# ---------------------------------------------------------------------------
# Reference geography
# ---------------------------------------------------------------------------
#
#   Kyrgyzstan  square lat/lng 0..10        (relation 1, way 100)
#   Kazakhstan  square lat/lng 20..30       (relation 2, way 101, not imported)
#   Bishkek     square lat/lng 2..6         (relation 10, city)
#   Almaty      square lat/lng 21..25       (relation 11, city, outside Kyrgyzstan)
#   Lenin       square lat/lng 3..4         (relation 20, node members, admin_level 9)
#   Oktyabr     square lat/lng 4.5..5.5     (closed way 30, place=suburb)
#
# Highways: "Chui Avenue" (ways 200, 202) crosses "Manas Avenue" (way 201)
# at node 202.

ADMIN = {"boundary": "administrative"}


def square_nodes(first_id: int, lat0: float, lng0: float, size: float) -> list[Node]:
    """Four corner nodes, counter-clockwise from the south-west corner."""
    corners = [
        (lat0, lng0),
        (lat0, lng0 + size),
        (lat0 + size, lng0 + size),
        (lat0 + size, lng0),
    ]
    return [Node(id=first_id + i, lat=lat, lon=lng) for i, (lat, lng) in enumerate(corners)]


def closed_way(way_id: int, nodes: list[Node], tags: dict[str, str] | None = None) -> Way:
    ids = tuple(n.id for n in nodes)
    return Way(id=way_id, node_ids=(*ids, ids[0]), tags=tags or {})


def way_relation(relation_id: int, way_id: int, tags: dict[str, str]) -> Relation:
    return Relation(
        id=relation_id,
        tags=tags,
        members=(Member(ref=way_id, type=MemberType.WAY, role="outer"),),
    )


def populate(acc: Accumulator) -> None:
    """Load the reference geography into *acc*."""
    boundaries = [
        (1, 100, 1, 0.0, 10.0, {**ADMIN, "admin_level": "2", "name": "Kyrgyzstan"}),
        (2, 101, 5, 20.0, 10.0, {**ADMIN, "admin_level": "2", "name": "Kazakhstan"}),
        (10, 110, 11, 2.0, 4.0, {"place": "city", "name": "Bishkek"}),
        (11, 111, 15, 21.0, 4.0, {"place": "city", "name": "Almaty"}),
    ]
    for relation_id, way_id, first_node, origin, size, tags in boundaries:
        nodes = square_nodes(first_node, origin, origin, size)
        for node in nodes:
            acc.add_node(node)
        acc.add_way(closed_way(way_id, nodes))
        acc.add_relation(way_relation(relation_id, way_id, tags))

    lenin = square_nodes(21, 3.0, 3.0, 1.0)
    for node in lenin:
        acc.add_node(node)
    acc.add_relation(
        Relation(
            id=20,
            tags={**ADMIN, "admin_level": "9", "name": "Lenin"},
            members=tuple(Member(ref=n.id, type=MemberType.NODE) for n in lenin),
        )
    )

    oktyabr = square_nodes(31, 4.5, 4.5, 1.0)
    for node in oktyabr:
        acc.add_node(node)
    acc.add_way(closed_way(30, oktyabr, {"place": "suburb", "name": "Oktyabr"}))

    street_nodes = [
        Node(id=201, lat=5.0, lon=2.5),
        Node(id=202, lat=5.0, lon=3.0),
        Node(id=203, lat=5.0, lon=3.5),
        Node(id=204, lat=4.8, lon=3.0),
        Node(id=205, lat=5.2, lon=3.0),
        Node(id=206, lat=5.0, lon=4.0),
    ]
    for node in street_nodes:
        acc.add_node(node)
    acc.add_way(Way(id=200, node_ids=(201, 202, 203), tags={"highway": "primary", "name": "Chui Avenue"}))
    acc.add_way(Way(id=201, node_ids=(204, 202, 205), tags={"highway": "primary", "name": "Manas Avenue"}))
    acc.add_way(Way(id=202, node_ids=(203, 206), tags={"highway": "primary", "name": "Chui Avenue"}))
    acc.add_way(Way(id=203, node_ids=(206, 999), tags={"highway": "service", "name": "Broken Lane"}))

    acc.add_node(Node(id=300, lat=2.5, lon=2.5, tags={"name": "Osh Bazaar", "amenity": "marketplace"}))
    acc.add_node(Node(id=301, lat=2.6, lon=2.6, tags={"name": "Ala-Too Square", "place": "square"}))


@pytest.fixture()
def sample_extract() -> OsmExtract:
    """The reference geography as a finalized extract."""
    acc = Accumulator()
    populate(acc)
    return acc.finalize()


@pytest.fixture()
def config(tmp_path) -> ImporterConfig:
    """Importer configuration writing debug exports into ``tmp_path``."""
    return ImporterConfig(
        import_country="Kyrgyzstan",
        osm_filename="unused.osm.pbf",
        index_backend="memory",
        debug_export_dir=str(tmp_path),
    )


@pytest.fixture()
def memory_backend(config: ImporterConfig) -> InMemoryBackend:
    """An in-memory backend with its indices already created."""
    backend = InMemoryBackend(config)
    backend.update_indices()
    return backend
