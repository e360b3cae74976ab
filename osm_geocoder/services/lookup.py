"""Lookup service: forward search and reverse geocoding.

Forward search is delegated to the index backend; ranking is whatever
the backend provides. Reverse geocoding walks the in-memory hierarchy
and tests the query point against each polygon with the full
point-in-polygon predicate. The deepest level wins: any enclosing
district, else any enclosing settlement, else the enclosing country.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from osm_geocoder.core.exceptions import ValidationError
from osm_geocoder.models.documents import ReverseGeocodeResult
from osm_geocoder.models.geometry import Point

if TYPE_CHECKING:
    from collections.abc import Sequence

    from osm_geocoder.backends.base import IndexBackend
    from osm_geocoder.models.documents import SearchHit
    from osm_geocoder.models.hierarchy import Country

logger = logging.getLogger(__name__)

LEVEL_DISTRICT = "district"
LEVEL_SETTLEMENT = "settlement"
LEVEL_COUNTRY = "country"

DEFAULT_RESULT_SIZE = 10


class InvalidQueryError(ValidationError):
    """Raised for an empty or whitespace-only search query."""

    default_stage = "lookup"
    default_code = "INVALID_QUERY"


class InvalidCoordinateError(ValidationError):
    """Raised for non-finite or out-of-range reverse geocoding coordinates."""

    default_stage = "lookup"
    default_code = "INVALID_COORDINATE"


def validate_coordinate(lat: float, lon: float) -> Point:
    """Return a ``Point`` for *lat*/*lon* or raise ``InvalidCoordinateError``."""
    if not (math.isfinite(lat) and math.isfinite(lon)):
        msg = f"Coordinates must be finite, got lat={lat!r} lon={lon!r}"
        raise InvalidCoordinateError(msg)
    if not -90.0 <= lat <= 90.0:
        msg = f"Latitude {lat} is outside [-90, 90]"
        raise InvalidCoordinateError(msg)
    if not -180.0 <= lon <= 180.0:
        msg = f"Longitude {lon} is outside [-180, 180]"
        raise InvalidCoordinateError(msg)
    return Point(lat=lat, lng=lon)


class LookupService:
    """Answers lookups against a populated index and a built hierarchy.

    Args:
        backend: Index backend used for forward search.
        countries: The hierarchy built by the importer (read-only).
        result_size: Maximum number of forward-search hits.
    """

    def __init__(
        self,
        backend: IndexBackend,
        countries: Sequence[Country],
        *,
        result_size: int = DEFAULT_RESULT_SIZE,
    ) -> None:
        self._backend = backend
        self._countries = tuple(countries)
        self._result_size = result_size

    def search(self, query: str) -> list[SearchHit]:
        """Return ranked index entries matching *query*.

        Raises:
            InvalidQueryError: If *query* is blank.
            IndexSearchError: If the backend cannot answer.
        """
        text = query.strip()
        if not text:
            msg = "Search query must not be empty"
            raise InvalidQueryError(msg)
        hits = self._backend.search(text, self._result_size)
        logger.info("Forward search | query=%s | hits=%d", text, len(hits))
        return hits

    def reverse(self, lat: float, lon: float) -> ReverseGeocodeResult | None:
        """Return the smallest administrative entity containing the point.

        Returns ``None`` when no country, settlement or district contains it.

        Raises:
            InvalidCoordinateError: If the coordinates are not valid WGS 84.
        """
        point = validate_coordinate(lat, lon)

        for country in self._countries:
            for settlement in country.settlements:
                for district in settlement.districts:
                    if district.polygon.contains(point):
                        return ReverseGeocodeResult(
                            level=LEVEL_DISTRICT,
                            name=district.name,
                            place_type=settlement.place_type,
                            settlement=settlement.name,
                            country=country.name,
                        )

        for country in self._countries:
            for settlement in country.settlements:
                if settlement.polygon.contains(point):
                    return ReverseGeocodeResult(
                        level=LEVEL_SETTLEMENT,
                        name=settlement.name,
                        place_type=settlement.place_type,
                        settlement=settlement.name,
                        country=country.name,
                    )

        for country in self._countries:
            if country.polygon.contains(point):
                return ReverseGeocodeResult(
                    level=LEVEL_COUNTRY,
                    name=country.name,
                    country=country.name,
                )

        logger.debug("Reverse geocode miss | lat=%s | lon=%s", lat, lon)
        return None
