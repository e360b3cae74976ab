"""Data models and schemas.

Defines the data structures used throughout the pipeline:
- Point, Polygon: geometry primitives with a containment predicate
- Node, Way, Relation: raw OSM records from the extract
- Country, Settlement, District: the derived administrative hierarchy
- Index documents and lookup responses (pydantic)
"""

from osm_geocoder.models.geometry import GeometryError, Point, Polygon
from osm_geocoder.models.hierarchy import (
    Country,
    District,
    HierarchyBuildResult,
    Settlement,
)
from osm_geocoder.models.osm import Member, MemberType, Node, Relation, Way

__all__ = [
    "Point",
    "Polygon",
    "GeometryError",
    "Node",
    "Way",
    "Member",
    "MemberType",
    "Relation",
    "Country",
    "Settlement",
    "District",
    "HierarchyBuildResult",
]
