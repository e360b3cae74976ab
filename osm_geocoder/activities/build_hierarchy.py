"""Hierarchy build activity.

Turns classified boundary candidates into the country → settlement →
district tree:

1. Assemble a polygon for each candidate, either from a relation
   (``relation_to_polygon``) or from a closed way (``way_to_polygon``).
2. For the configured import country only, export its ring for
   inspection, then attach every settlement whose representative point
   lies inside the country polygon.
3. Attach each district to the first attached settlement (in stream
   order) whose polygon contains the district's representative point.
   Settlements outside the country are never candidates, so a district
   inside such a settlement stays unattached; this is a strict tree
   rather than "first settlement in stream order" over all candidates.

Nesting uses a representative-point heuristic rather than ring-in-ring
containment: the second point of the child ring is tested against the
parent polygon. This is O(1) per pair instead of O(ring size), and is
knowingly wrong for concave or oddly ordered boundaries. The test is a
pluggable ``ContainmentStrategy`` so a full-ring test can be swapped in
without touching tree construction.

Input tolerance: unresolved members, unresolved node references and
missing tags degrade the affected entity, never the build. Only a ring
with no resolvable point at all causes the candidate to be skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from osm_geocoder.core.constants import REPRESENTATIVE_POINT_INDEX, TAG_PLACE
from osm_geocoder.core.exceptions import PermanentError
from osm_geocoder.models.geometry import Polygon
from osm_geocoder.models.hierarchy import (
    Country,
    District,
    HierarchyBuildResult,
    Settlement,
)
from osm_geocoder.models.osm import MemberType, Relation, Way

if TYPE_CHECKING:
    from osm_geocoder.activities.accumulate import OsmExtract
    from osm_geocoder.models.geometry import Point

logger = logging.getLogger(__name__)

#: Nesting test ``(parent, child) -> bool``.
ContainmentStrategy = Callable[[Polygon, Polygon], bool]


class DebugExportError(PermanentError):
    """Raised when a country boundary cannot be written for inspection.

    Collected in ``HierarchyBuildResult.export_errors``; never propagated
    out of the build.
    """

    default_stage = "build_hierarchy"
    default_code = "DEBUG_EXPORT_FAILED"


# ---------------------------------------------------------------------------
# Containment strategies
# ---------------------------------------------------------------------------


def representative_point_containment(parent: Polygon, child: Polygon) -> bool:
    """Return whether the second point of *child*'s ring lies inside *parent*.

    A child ring with a single point has no representative point and is
    never contained.
    """
    if len(child) <= REPRESENTATIVE_POINT_INDEX:
        return False
    return parent.contains(child.points[REPRESENTATIVE_POINT_INDEX])


# ---------------------------------------------------------------------------
# Debug export
# ---------------------------------------------------------------------------


def export_country_ring(polygon: Polygon, name: str, directory: Path) -> Path:
    """Write one ``lng,lat`` line per ring point to ``directory/name``.

    Raises:
        DebugExportError: If the file cannot be written.
    """
    target = directory / name.replace("/", "_")
    try:
        with target.open("w", encoding="utf-8") as fh:
            for point in polygon:
                fh.write(f"{point.lng},{point.lat}\n")
    except OSError as exc:
        msg = f"Cannot write boundary export for {name!r} to {target}: {exc}"
        raise DebugExportError(msg) from exc
    return target


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class HierarchyBuilder:
    """Builds the administrative tree from one ``OsmExtract``.

    Args:
        extract: Read-only extract produced by the parser.
        import_country: ``name`` tag of the only country to materialise.
        export_dir: Directory for per-country boundary exports, or
            ``None`` to disable them.
        containment: Nesting test ``(parent, child) -> bool``.
    """

    def __init__(
        self,
        extract: OsmExtract,
        *,
        import_country: str,
        export_dir: Path | None = None,
        containment: ContainmentStrategy = representative_point_containment,
    ) -> None:
        self._extract = extract
        self._import_country = import_country
        self._export_dir = export_dir
        self._containment = containment

    # -- polygon assembly -------------------------------------------------

    def _way_points(self, way: Way) -> list[Point]:
        nodes = self._extract.nodes
        points = []
        for node_id in way.node_ids:
            node = nodes.get(node_id)
            if node is None:
                logger.debug("Skipping unresolved node | way=%d | node=%d", way.id, node_id)
                continue
            points.append(node.to_point())
        return points

    def relation_to_polygon(self, relation: Relation) -> Polygon | None:
        """Concatenate the points of every member, in member order.

        Node members contribute their single point; way members contribute
        every point of the fully resolved way. Members resolving to
        neither are skipped. Returns ``None`` if nothing resolves.
        """
        points: list[Point] = []
        for member in relation.members:
            if member.type is MemberType.NODE:
                node = self._extract.nodes.get(member.ref)
                if node is not None:
                    points.append(node.to_point())
                    continue
            elif member.type is MemberType.WAY:
                way = self._extract.full_ways.get(member.ref)
                if way is not None:
                    points.extend(self._way_points(way))
                    continue
            logger.debug(
                "Skipping unresolved member | relation=%d | ref=%d | type=%s",
                relation.id,
                member.ref,
                member.type.name,
            )
        if not points:
            return None
        return Polygon.from_points(points)

    def way_to_polygon(self, way: Way) -> Polygon | None:
        """Resolve every node reference of *way* in order, skipping missing ones."""
        points = self._way_points(way)
        if not points:
            return None
        return Polygon.from_points(points)

    def _to_polygon(self, boundary: Relation | Way) -> Polygon | None:
        if isinstance(boundary, Way):
            polygon = self.way_to_polygon(boundary)
        else:
            polygon = self.relation_to_polygon(boundary)
        if polygon is None:
            logger.warning(
                "Skipping boundary with empty ring | id=%d | name=%s",
                boundary.id,
                boundary.name,
            )
        return polygon

    # -- tree construction ------------------------------------------------

    def build(self) -> HierarchyBuildResult:
        """Build the hierarchy for the configured country.

        Returns:
            A ``HierarchyBuildResult`` holding the countries, the number of
            skipped candidates and any debug-export failures.
        """
        logger.info("Hierarchy build started | country=%s", self._import_country)
        skipped = 0

        settlements: list[tuple[Relation, Polygon]] = []
        for relation in self._extract.settlements:
            polygon = self._to_polygon(relation)
            if polygon is None:
                skipped += 1
                continue
            settlements.append((relation, polygon))

        districts: list[District] = []
        for boundary in self._extract.districts:
            polygon = self._to_polygon(boundary)
            if polygon is None:
                skipped += 1
                continue
            districts.append(District(name=boundary.name, polygon=polygon))

        countries: list[Country] = []
        export_errors: list[DebugExportError] = []
        for relation in self._extract.countries:
            if relation.name != self._import_country:
                continue
            polygon = self._to_polygon(relation)
            if polygon is None:
                skipped += 1
                continue

            if self._export_dir is not None:
                try:
                    export_country_ring(polygon, relation.name, self._export_dir)
                except DebugExportError as exc:
                    logger.warning("Boundary export skipped | country=%s | error=%s", relation.name, exc)
                    export_errors.append(exc)

            countries.append(self._build_country(relation, polygon, settlements, districts))

        result = HierarchyBuildResult(
            countries=tuple(countries),
            skipped_relations=skipped,
            export_errors=tuple(export_errors),
        )
        logger.info(
            "Hierarchy build finished | countries=%d | settlements=%d | districts=%d | skipped=%d",
            len(result.countries),
            result.settlement_count,
            result.district_count,
            skipped,
        )
        return result

    def _build_country(
        self,
        relation: Relation,
        polygon: Polygon,
        settlements: list[tuple[Relation, Polygon]],
        districts: list[District],
    ) -> Country:
        claimed: set[int] = set()
        children: list[Settlement] = []
        for settlement_relation, settlement_polygon in settlements:
            if not self._containment(polygon, settlement_polygon):
                continue
            attached = []
            for index, district in enumerate(districts):
                if index in claimed:
                    continue
                if self._containment(settlement_polygon, district.polygon):
                    claimed.add(index)
                    attached.append(district)
            children.append(
                Settlement(
                    name=settlement_relation.name,
                    place_type=settlement_relation.tags.get(TAG_PLACE, ""),
                    polygon=settlement_polygon,
                    districts=tuple(attached),
                )
            )
        return Country(name=relation.name, polygon=polygon, settlements=tuple(children))
