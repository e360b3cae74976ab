"""Raw OSM record types held by the accumulator.

These are plain, immutable copies of what the streaming reader sees:
nodes with coordinates, ways as ordered node references, and relations
as ordered typed member references. Tags are kept as plain dicts.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from osm_geocoder.core.constants import TAG_NAME
from osm_geocoder.models.geometry import Point


class MemberType(enum.Enum):
    """Kind of object a relation member refers to."""

    NODE = "n"
    WAY = "w"
    RELATION = "r"


@dataclass(frozen=True, slots=True)
class Node:
    """A resolved OSM node.

    Attributes:
        id: OSM node id.
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        tags: Node tags.
    """

    id: int
    lat: float
    lon: float
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.tags.get(TAG_NAME, "")

    def to_point(self) -> Point:
        return Point(lat=self.lat, lng=self.lon)


@dataclass(frozen=True, slots=True)
class Way:
    """An OSM way: an ordered list of node references.

    Attributes:
        id: OSM way id.
        node_ids: Referenced node ids in way order.
        tags: Way tags.
    """

    id: int
    node_ids: tuple[int, ...] = ()
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.tags.get(TAG_NAME, "")

    @property
    def is_closed(self) -> bool:
        """Whether the way ends where it starts (and has an interior to speak of)."""
        return len(self.node_ids) > 2 and self.node_ids[0] == self.node_ids[-1]


@dataclass(frozen=True, slots=True)
class Member:
    """A single relation member reference."""

    ref: int
    type: MemberType
    role: str = ""


@dataclass(frozen=True, slots=True)
class Relation:
    """An OSM relation with ordered members.

    Attributes:
        id: OSM relation id.
        tags: Relation tags (``name``, ``place``, ``admin_level``...).
        members: Members in relation order.
    """

    id: int
    tags: dict[str, str] = field(default_factory=dict)
    members: tuple[Member, ...] = ()

    @property
    def name(self) -> str:
        return self.tags.get(TAG_NAME, "")
