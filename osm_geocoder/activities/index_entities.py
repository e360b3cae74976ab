"""Index document derivation and push activities.

Each of the three datasets is derived from the read-only extract and
pushed to the backend by its own task; the tasks share no mutable state
and run concurrently under the importer's task group.

- ``push_junctions``: nodes shared by differently named highways
- ``push_nodes``: every named node
- ``push_ways``: every named, fully resolved way
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shapely.geometry import MultiPoint

from osm_geocoder.core.constants import JUNCTION_NAME_SEPARATOR, TAG_HIGHWAY
from osm_geocoder.models.documents import (
    GeoLocation,
    JunctionDocument,
    NodeDocument,
    WayDocument,
)

if TYPE_CHECKING:
    from osm_geocoder.activities.accumulate import OsmExtract
    from osm_geocoder.backends.base import IndexBackend

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document derivation
# ---------------------------------------------------------------------------


def build_junction_documents(extract: OsmExtract) -> list[JunctionDocument]:
    """Derive road junctions from named highways.

    A junction is a node referenced by at least two named ``highway``
    ways with different names. Junctions are emitted in the order their
    node is first referenced.
    """
    streets_at: dict[int, set[str]] = {}
    for way in extract.full_ways.values():
        if TAG_HIGHWAY not in way.tags or not way.name:
            continue
        for node_id in way.node_ids:
            streets_at.setdefault(node_id, set()).add(way.name)

    documents = []
    for node_id, names in streets_at.items():
        if len(names) < 2:
            continue
        node = extract.nodes[node_id]
        street_names = sorted(names)
        documents.append(
            JunctionDocument(
                id=str(node_id),
                name=JUNCTION_NAME_SEPARATOR.join(street_names),
                street_names=street_names,
                location=GeoLocation(lat=node.lat, lon=node.lon),
            )
        )
    return documents


def build_node_documents(extract: OsmExtract) -> list[NodeDocument]:
    """One document per node carrying a non-empty ``name`` tag."""
    return [
        NodeDocument(
            id=str(node.id),
            name=node.name,
            tags=dict(node.tags),
            location=GeoLocation(lat=node.lat, lon=node.lon),
        )
        for node in extract.nodes.values()
        if node.name
    ]


def build_way_documents(extract: OsmExtract) -> list[WayDocument]:
    """One document per named, fully resolved way, located at its centroid."""
    documents = []
    for way in extract.full_ways.values():
        if not way.name or not way.node_ids:
            continue
        centroid = MultiPoint(
            [(extract.nodes[n].lon, extract.nodes[n].lat) for n in way.node_ids]
        ).centroid
        documents.append(
            WayDocument(
                id=str(way.id),
                name=way.name,
                tags=dict(way.tags),
                node_count=len(way.node_ids),
                location=GeoLocation(lat=centroid.y, lon=centroid.x),
            )
        )
    return documents


# ---------------------------------------------------------------------------
# Push tasks
# ---------------------------------------------------------------------------


def push_junctions(extract: OsmExtract, backend: IndexBackend) -> int:
    """Derive and push the junction dataset. Returns the pushed count."""
    documents = build_junction_documents(extract)
    logger.info("Pushing junctions | documents=%d", len(documents))
    return backend.push_junctions(documents)


def push_nodes(extract: OsmExtract, backend: IndexBackend) -> int:
    """Derive and push the named-node dataset. Returns the pushed count."""
    documents = build_node_documents(extract)
    logger.info("Pushing nodes | documents=%d", len(documents))
    return backend.push_nodes(documents)


def push_ways(extract: OsmExtract, backend: IndexBackend) -> int:
    """Derive and push the named-way dataset. Returns the pushed count."""
    documents = build_way_documents(extract)
    logger.info("Pushing ways | documents=%d", len(documents))
    return backend.push_ways(documents)
