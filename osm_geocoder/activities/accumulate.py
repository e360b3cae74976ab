"""Accumulator for records streamed out of an OSM extract.

The streaming reader pushes nodes, ways and relations into an
``Accumulator`` one at a time. Boundary candidates are classified on
arrival into three disjoint, append-only groups (countries, settlements,
districts) so that "first containing parent wins" resolves identically
on every run over the same extract.

Once the stream ends, ``finalize()`` resolves full ways and returns an
``OsmExtract``: a read-only view handed to the hierarchy builder and to
the indexing tasks. An accumulator is single-use and owned by one run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from osm_geocoder.core.constants import (
    BOUNDARY_ADMINISTRATIVE,
    COUNTRY_ADMIN_LEVEL,
    DISTRICT_ADMIN_LEVELS,
    DISTRICT_PLACE_TYPES,
    SETTLEMENT_PLACE_TYPES,
    TAG_ADMIN_LEVEL,
    TAG_BOUNDARY,
    TAG_PLACE,
)
from osm_geocoder.core.exceptions import ContractError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from osm_geocoder.models.osm import Node, Relation, Way

logger = logging.getLogger(__name__)

# Boundary group names
COUNTRY = "country"
SETTLEMENT = "settlement"
DISTRICT = "district"


class AccumulatorClosedError(ContractError):
    """Raised when records are added to an accumulator after ``finalize()``."""

    default_stage = "parse_osm"
    default_code = "ACCUMULATOR_CLOSED"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def _is_administrative(tags: Mapping[str, str]) -> bool:
    return tags.get(TAG_BOUNDARY) == BOUNDARY_ADMINISTRATIVE


def _is_district(tags: Mapping[str, str]) -> bool:
    if _is_administrative(tags) and tags.get(TAG_ADMIN_LEVEL) in DISTRICT_ADMIN_LEVELS:
        return True
    return tags.get(TAG_PLACE) in DISTRICT_PLACE_TYPES


def classify_relation(relation: Relation) -> str | None:
    """Return the boundary group for *relation*, or ``None``.

    Rules are checked in order (country, settlement, district); the first
    match wins, which keeps the groups disjoint.
    """
    tags = relation.tags
    if _is_administrative(tags) and tags.get(TAG_ADMIN_LEVEL) == COUNTRY_ADMIN_LEVEL:
        return COUNTRY
    if tags.get(TAG_PLACE) in SETTLEMENT_PLACE_TYPES:
        return SETTLEMENT
    if _is_district(tags):
        return DISTRICT
    return None


def classify_way(way: Way) -> str | None:
    """Return ``"district"`` for closed ways tagged as districts, else ``None``."""
    if way.is_closed and _is_district(way.tags):
        return DISTRICT
    return None


# ---------------------------------------------------------------------------
# Read-only view
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OsmExtract:
    """Immutable, read-only view over one parsed extract.

    Attributes:
        nodes: Every node with a valid location, by id.
        ways: Every way, by id.
        full_ways: Ways whose every node reference resolves, by id.
        countries: Country candidates in stream order.
        settlements: Settlement candidates in stream order.
        districts: District candidates (relations or closed ways) in stream order.
    """

    nodes: Mapping[int, Node] = field(default_factory=lambda: MappingProxyType({}))
    ways: Mapping[int, Way] = field(default_factory=lambda: MappingProxyType({}))
    full_ways: Mapping[int, Way] = field(default_factory=lambda: MappingProxyType({}))
    countries: tuple[Relation, ...] = ()
    settlements: tuple[Relation, ...] = ()
    districts: tuple[Relation | Way, ...] = ()


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------


class Accumulator:
    """Single-owner, append-only store populated by the streaming reader."""

    def __init__(self) -> None:
        self._nodes: dict[int, Node] = {}
        self._ways: dict[int, Way] = {}
        self._groups: dict[str, list[Relation | Way]] = {
            COUNTRY: [],
            SETTLEMENT: [],
            DISTRICT: [],
        }
        self._finalized = False

    def _check_open(self) -> None:
        if self._finalized:
            msg = "Accumulator already finalized; start a new run with a fresh accumulator"
            raise AccumulatorClosedError(msg)

    def add_node(self, node: Node) -> None:
        self._check_open()
        self._nodes[node.id] = node

    def add_way(self, way: Way) -> None:
        self._check_open()
        self._ways[way.id] = way
        group = classify_way(way)
        if group is not None:
            self._groups[group].append(way)

    def add_relation(self, relation: Relation) -> None:
        self._check_open()
        group = classify_relation(relation)
        if group is not None:
            self._groups[group].append(relation)

    def finalize(self) -> OsmExtract:
        """Close the accumulator and return its read-only view.

        Ways referencing a node that is missing from the extract are
        kept in ``ways`` but excluded from ``full_ways``.
        """
        self._check_open()
        self._finalized = True

        full_ways = {
            way_id: way
            for way_id, way in self._ways.items()
            if all(node_id in self._nodes for node_id in way.node_ids)
        }

        extract = OsmExtract(
            nodes=MappingProxyType(self._nodes),
            ways=MappingProxyType(self._ways),
            full_ways=MappingProxyType(full_ways),
            countries=tuple(self._groups[COUNTRY]),  # type: ignore[arg-type]
            settlements=tuple(self._groups[SETTLEMENT]),  # type: ignore[arg-type]
            districts=tuple(self._groups[DISTRICT]),
        )

        logger.info(
            "Extract accumulated | nodes=%d | ways=%d | full_ways=%d | "
            "countries=%d | settlements=%d | districts=%d",
            len(extract.nodes),
            len(extract.ways),
            len(extract.full_ways),
            len(extract.countries),
            len(extract.settlements),
            len(extract.districts),
        )
        return extract
