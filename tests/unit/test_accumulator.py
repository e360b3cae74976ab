"""Unit tests for the record accumulator and boundary classification."""

from __future__ import annotations

import pytest

from osm_geocoder.activities.accumulate import (
    COUNTRY,
    DISTRICT,
    SETTLEMENT,
    Accumulator,
    AccumulatorClosedError,
    OsmExtract,
    classify_relation,
    classify_way,
)
from osm_geocoder.models.osm import Node, Relation, Way


class TestClassifyRelation:
    @pytest.mark.parametrize(
        ("tags", "expected"),
        [
            ({"boundary": "administrative", "admin_level": "2", "name": "Kyrgyzstan"}, COUNTRY),
            ({"place": "city", "name": "Bishkek"}, SETTLEMENT),
            ({"place": "village", "name": "Arashan"}, SETTLEMENT),
            ({"place": "hamlet"}, SETTLEMENT),
            ({"boundary": "administrative", "admin_level": "9", "name": "Lenin"}, DISTRICT),
            ({"boundary": "administrative", "admin_level": "10"}, DISTRICT),
            ({"place": "suburb", "name": "Asanbai"}, DISTRICT),
            ({"boundary": "administrative", "admin_level": "4", "name": "Chui Region"}, None),
            ({"admin_level": "2", "name": "Not a boundary"}, None),
            ({"route": "bus"}, None),
            ({}, None),
        ],
    )
    def test_groups(self, tags: dict[str, str], expected: str | None) -> None:
        assert classify_relation(Relation(id=1, tags=tags)) == expected

    def test_first_rule_wins(self) -> None:
        """A country relation that also carries a place tag stays a country."""
        tags = {"boundary": "administrative", "admin_level": "2", "place": "city"}
        assert classify_relation(Relation(id=1, tags=tags)) == COUNTRY

    def test_settlement_beats_district(self) -> None:
        tags = {"boundary": "administrative", "admin_level": "9", "place": "town"}
        assert classify_relation(Relation(id=1, tags=tags)) == SETTLEMENT


class TestClassifyWay:
    def test_closed_district_way(self) -> None:
        way = Way(id=1, node_ids=(1, 2, 3, 1), tags={"place": "suburb"})
        assert classify_way(way) == DISTRICT

    def test_open_way_is_not_a_district(self) -> None:
        way = Way(id=1, node_ids=(1, 2, 3), tags={"place": "suburb"})
        assert classify_way(way) is None

    def test_untagged_closed_way(self) -> None:
        assert classify_way(Way(id=1, node_ids=(1, 2, 3, 1))) is None


class TestAccumulator:
    def test_groups_keep_insertion_order(self) -> None:
        acc = Accumulator()
        for relation_id in (30, 10, 20):
            acc.add_relation(Relation(id=relation_id, tags={"place": "town"}))
        extract = acc.finalize()
        assert [r.id for r in extract.settlements] == [30, 10, 20]

    def test_district_group_mixes_relations_and_ways(self) -> None:
        acc = Accumulator()
        acc.add_relation(Relation(id=5, tags={"place": "suburb"}))
        acc.add_way(Way(id=6, node_ids=(1, 2, 3, 1), tags={"place": "quarter"}))
        extract = acc.finalize()
        assert [(type(d).__name__, d.id) for d in extract.districts] == [("Relation", 5), ("Way", 6)]

    def test_unclassified_relations_dropped(self) -> None:
        acc = Accumulator()
        acc.add_relation(Relation(id=1, tags={"route": "bus"}))
        extract = acc.finalize()
        assert extract.countries == ()
        assert extract.settlements == ()
        assert extract.districts == ()

    def test_full_ways_require_every_node(self) -> None:
        acc = Accumulator()
        acc.add_node(Node(id=1, lat=0.0, lon=0.0))
        acc.add_node(Node(id=2, lat=1.0, lon=1.0))
        acc.add_way(Way(id=10, node_ids=(1, 2)))
        acc.add_way(Way(id=11, node_ids=(1, 2, 3)))
        extract = acc.finalize()
        assert set(extract.ways) == {10, 11}
        assert set(extract.full_ways) == {10}

    def test_finalized_view_is_read_only(self) -> None:
        acc = Accumulator()
        acc.add_node(Node(id=1, lat=0.0, lon=0.0))
        extract = acc.finalize()
        with pytest.raises(TypeError):
            extract.nodes[2] = Node(id=2, lat=0.0, lon=0.0)  # type: ignore[index]
        with pytest.raises(AttributeError):
            extract.countries = ()  # type: ignore[misc]

    def test_single_use(self) -> None:
        acc = Accumulator()
        acc.finalize()
        with pytest.raises(AccumulatorClosedError):
            acc.add_node(Node(id=1, lat=0.0, lon=0.0))
        with pytest.raises(AccumulatorClosedError):
            acc.finalize()

    def test_sample_extract_contents(self, sample_extract: OsmExtract) -> None:
        assert [r.name for r in sample_extract.countries] == ["Kyrgyzstan", "Kazakhstan"]
        assert [r.name for r in sample_extract.settlements] == ["Bishkek", "Almaty"]
        assert [d.name for d in sample_extract.districts] == ["Lenin", "Oktyabr"]
        assert 203 not in sample_extract.full_ways
