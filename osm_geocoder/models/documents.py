"""Pydantic models for index documents and lookup responses.

Three index datasets are produced by an import run:

- **junctions**: nodes where differently named highways meet
- **nodes**: named point entities (shops, stops, monuments...)
- **ways**: named, fully resolved ways (streets, buildings, parks...)

All locations use the Elasticsearch ``geo_point`` object form
``{"lat": ..., "lon": ...}``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from osm_geocoder.core.constants import DATASET_JUNCTIONS, DATASET_NODES, DATASET_WAYS


class GeoLocation(BaseModel):
    """A WGS 84 location in ``geo_point`` object form."""

    lat: float
    lon: float


class IndexDocument(BaseModel):
    """Common fields of every indexed entity.

    Attributes:
        id: Document id, unique within its dataset.
        name: Display name used for text search.
        location: Representative location.
    """

    #: Dataset the document belongs to (overridden by subclasses).
    dataset: str = ""

    id: str
    name: str
    location: GeoLocation

    def to_source(self) -> dict[str, object]:
        """Return the document body as stored in the index."""
        return self.model_dump(exclude={"dataset"})


class JunctionDocument(IndexDocument):
    """A road-network junction between differently named highways."""

    dataset: str = DATASET_JUNCTIONS
    street_names: list[str] = Field(default_factory=list)


class NodeDocument(IndexDocument):
    """A named OSM node."""

    dataset: str = DATASET_NODES
    tags: dict[str, str] = Field(default_factory=dict)


class WayDocument(IndexDocument):
    """A named, fully resolved OSM way, located at its centroid."""

    dataset: str = DATASET_WAYS
    tags: dict[str, str] = Field(default_factory=dict)
    node_count: int = 0


class SearchHit(BaseModel):
    """One ranked forward-search result."""

    dataset: str
    id: str
    name: str
    score: float = 0.0
    location: GeoLocation
    tags: dict[str, str] = Field(default_factory=dict)
    street_names: list[str] = Field(default_factory=list)


class ReverseGeocodeResult(BaseModel):
    """Smallest administrative entity enclosing a coordinate.

    Attributes:
        level: ``"district"``, ``"settlement"`` or ``"country"``.
        name: Name of the matched entity.
        place_type: ``place`` tag of the settlement involved (empty for countries).
        settlement: Enclosing settlement name (empty above settlement level).
        country: Enclosing country name.
    """

    level: str
    name: str
    place_type: str = ""
    settlement: str = ""
    country: str = ""
