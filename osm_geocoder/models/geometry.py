"""Geometry primitives: a WGS 84 point and a single-ring polygon.

Containment is delegated to shapely (prepared geometry, built lazily and
cached per polygon). Polygons are single rings only: holes and
multi-polygons are not modelled.

Degenerate rings (fewer than ``MIN_RING_POINTS`` points) contain nothing.
Self-intersecting rings are accepted as-is; the predicate stays
deterministic but is not guaranteed to be geometrically meaningful.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.prepared import prep

from osm_geocoder.core.constants import MIN_RING_POINTS
from osm_geocoder.core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from shapely.prepared import PreparedGeometry


class GeometryError(ValidationError):
    """Raised when a point or polygon is constructed from invalid values."""

    default_stage = "geometry"
    default_code = "INVALID_GEOMETRY"


@dataclass(frozen=True, slots=True)
class Point:
    """A latitude/longitude pair in decimal degrees.

    Attributes:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            msg = f"Point coordinates must be finite, got lat={self.lat!r} lng={self.lng!r}"
            raise GeometryError(msg)

    def to_lon_lat(self) -> tuple[float, float]:
        """Return ``(lon, lat)``, the axis order shapely and GeoJSON expect."""
        return (self.lng, self.lat)


@dataclass(frozen=True)
class Polygon:
    """An ordered, closed ring of points (last point joins the first).

    The ring is stored exactly as assembled: no re-ordering, closing or
    de-duplication is applied.
    """

    points: tuple[Point, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.points:
            msg = "Polygon ring must contain at least one point"
            raise GeometryError(msg)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Polygon:
        """Build a polygon from any iterable of points."""
        return cls(tuple(points))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    @property
    def is_degenerate(self) -> bool:
        """Whether the ring has too few points to enclose an area."""
        return len(self.points) < MIN_RING_POINTS

    @cached_property
    def _prepared(self) -> PreparedGeometry | None:
        coords = [p.to_lon_lat() for p in self.points]
        # An explicitly closed ring repeats its first position.
        if len(coords) > 1 and coords[0] == coords[-1]:
            coords = coords[:-1]
        if len(coords) < MIN_RING_POINTS:
            return None
        return prep(ShapelyPolygon(coords))

    def contains(self, point: Point) -> bool:
        """Return whether *point* lies strictly inside the ring.

        Points on the boundary are not contained. Degenerate rings
        always return ``False``, including explicitly closed rings with
        fewer than three positions before the closing one.
        """
        prepared = self._prepared
        if prepared is None:
            return False
        return bool(prepared.contains(ShapelyPoint(point.to_lon_lat())))
