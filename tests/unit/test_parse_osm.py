"""Unit tests for the osmium-based extract parser."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from osm_geocoder.activities.parse_osm import AccumulatingHandler, OsmParseError, parse_osm
from osm_geocoder.models.osm import MemberType

SAMPLE_OSM = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6" generator="test">
  <node id="1" version="1" lat="0.0" lon="0.0"/>
  <node id="2" version="1" lat="0.0" lon="10.0"/>
  <node id="3" version="1" lat="10.0" lon="10.0"/>
  <node id="4" version="1" lat="10.0" lon="0.0"/>
  <node id="5" version="1" lat="5.0" lon="5.0">
    <tag k="name" v="Osh Bazaar"/>
    <tag k="amenity" v="marketplace"/>
  </node>
  <way id="100" version="1">
    <nd ref="1"/>
    <nd ref="2"/>
    <nd ref="3"/>
    <nd ref="4"/>
    <nd ref="1"/>
  </way>
  <way id="101" version="1">
    <nd ref="1"/>
    <nd ref="42"/>
    <tag k="highway" v="residential"/>
  </way>
  <relation id="7" version="1">
    <member type="way" ref="100" role="outer"/>
    <member type="node" ref="5" role="admin_centre"/>
    <tag k="type" v="boundary"/>
    <tag k="boundary" v="administrative"/>
    <tag k="admin_level" v="2"/>
    <tag k="name" v="Kyrgyzstan"/>
  </relation>
</osm>
"""


@pytest.fixture()
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.osm"
    path.write_text(SAMPLE_OSM, encoding="utf-8")
    return path


class TestParseOsm:
    def test_nodes_copied_with_tags(self, sample_file: Path) -> None:
        extract = parse_osm(sample_file)
        assert set(extract.nodes) == {1, 2, 3, 4, 5}
        node = extract.nodes[5]
        assert (node.lat, node.lon) == (5.0, 5.0)
        assert node.tags == {"name": "Osh Bazaar", "amenity": "marketplace"}

    def test_ways_and_full_ways(self, sample_file: Path) -> None:
        extract = parse_osm(sample_file)
        assert extract.ways[100].node_ids == (1, 2, 3, 4, 1)
        assert 100 in extract.full_ways
        assert 101 in extract.ways
        assert 101 not in extract.full_ways

    def test_relation_classified_with_typed_members(self, sample_file: Path) -> None:
        extract = parse_osm(sample_file)
        assert len(extract.countries) == 1
        country = extract.countries[0]
        assert country.name == "Kyrgyzstan"
        assert [(m.ref, m.type, m.role) for m in country.members] == [
            (100, MemberType.WAY, "outer"),
            (5, MemberType.NODE, "admin_centre"),
        ]

    def test_accepts_string_path(self, sample_file: Path) -> None:
        assert len(parse_osm(str(sample_file)).nodes) == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OsmParseError, match="not found"):
            parse_osm(tmp_path / "missing.osm.pbf")

    def test_reader_failure_wrapped(self, sample_file: Path) -> None:
        with (
            patch.object(AccumulatingHandler, "apply_file", side_effect=RuntimeError("bad blob")),
            pytest.raises(OsmParseError, match="bad blob") as exc_info,
        ):
            parse_osm(sample_file)
        assert exc_info.value.stage == "parse_osm"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
