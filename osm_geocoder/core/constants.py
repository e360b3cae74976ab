"""Shared pipeline constants — single source of truth.

Centralises OSM tag keys, the tag vocabularies used to classify boundary
relations, dataset names and the representative-point index used by the
containment heuristic.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# OSM tag keys
# ---------------------------------------------------------------------------

TAG_NAME: str = "name"
TAG_PLACE: str = "place"
TAG_BOUNDARY: str = "boundary"
TAG_ADMIN_LEVEL: str = "admin_level"
TAG_HIGHWAY: str = "highway"

BOUNDARY_ADMINISTRATIVE: str = "administrative"

# ---------------------------------------------------------------------------
# Boundary classification vocabularies
# ---------------------------------------------------------------------------

COUNTRY_ADMIN_LEVEL: str = "2"
"""``admin_level`` of a country boundary relation."""

SETTLEMENT_PLACE_TYPES: frozenset[str] = frozenset({"city", "town", "village", "hamlet"})
"""``place`` values that classify a relation as a settlement."""

DISTRICT_ADMIN_LEVELS: frozenset[str] = frozenset({"9", "10"})
"""``admin_level`` values that classify a boundary as a district."""

DISTRICT_PLACE_TYPES: frozenset[str] = frozenset({"suburb", "quarter", "neighbourhood"})
"""``place`` values that classify a boundary as a district."""

# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

MIN_RING_POINTS: int = 3
"""Rings with fewer points never contain anything."""

REPRESENTATIVE_POINT_INDEX: int = 1
"""Ring position of the point used by the nesting heuristic (the second point)."""

# ---------------------------------------------------------------------------
# Index datasets
# ---------------------------------------------------------------------------

DATASET_JUNCTIONS: str = "junctions"
DATASET_NODES: str = "nodes"
DATASET_WAYS: str = "ways"

DATASETS: tuple[str, ...] = (DATASET_JUNCTIONS, DATASET_NODES, DATASET_WAYS)

JUNCTION_NAME_SEPARATOR: str = " & "


def index_name(prefix: str, dataset: str) -> str:
    """Return the backend index name for *dataset* under *prefix*.

    Args:
        prefix: Configured index prefix (e.g. ``"osm"``).
        dataset: One of ``DATASETS``.

    Returns:
        ``"{prefix}-{dataset}"``, e.g. ``"osm-junctions"``.
    """
    return f"{prefix}-{dataset}"
