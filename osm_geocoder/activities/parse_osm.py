"""OSM extract parsing activity.

Streams an ``.osm`` / ``.osm.pbf`` / ``.osm.bz2`` extract through
``osmium.SimpleHandler`` and copies every record into an ``Accumulator``.
Osmium objects are only valid inside the callback, so nothing from
osmium is retained: each record is converted into a plain model first.

A parse failure is a pipeline-setup error: it aborts the run.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import osmium

from osm_geocoder.activities.accumulate import Accumulator, OsmExtract
from osm_geocoder.core.exceptions import PermanentError
from osm_geocoder.models.osm import Member, MemberType, Node, Relation, Way

logger = logging.getLogger(__name__)


class OsmParseError(PermanentError):
    """Raised when the extract is missing or cannot be decoded."""

    default_stage = "parse_osm"
    default_code = "OSM_PARSE_FAILED"


def _tags(tag_list: osmium.osm.TagList) -> dict[str, str]:
    return {tag.k: tag.v for tag in tag_list}


class AccumulatingHandler(osmium.SimpleHandler):
    """Osmium handler that feeds an ``Accumulator``.

    Nodes without a valid location are dropped; relation members of an
    unknown type are dropped.
    """

    def __init__(self, accumulator: Accumulator) -> None:
        super().__init__()
        self.accumulator = accumulator
        self.invalid_nodes = 0

    def node(self, n: osmium.osm.Node) -> None:
        if not n.location.valid():
            self.invalid_nodes += 1
            return
        self.accumulator.add_node(
            Node(id=n.id, lat=n.location.lat, lon=n.location.lon, tags=_tags(n.tags))
        )

    def way(self, w: osmium.osm.Way) -> None:
        self.accumulator.add_way(
            Way(id=w.id, node_ids=tuple(nr.ref for nr in w.nodes), tags=_tags(w.tags))
        )

    def relation(self, r: osmium.osm.Relation) -> None:
        members = []
        for m in r.members:
            try:
                member_type = MemberType(m.type)
            except ValueError:
                logger.debug("Dropping member of unknown type | relation=%d | type=%s", r.id, m.type)
                continue
            members.append(Member(ref=m.ref, type=member_type, role=m.role))
        self.accumulator.add_relation(
            Relation(id=r.id, tags=_tags(r.tags), members=tuple(members))
        )


def parse_osm(path: str | Path) -> OsmExtract:
    """Parse an OSM extract into a read-only ``OsmExtract``.

    Blocks until the whole file has been streamed.

    Args:
        path: Location of the extract on the local filesystem.

    Returns:
        The finalized extract view.

    Raises:
        OsmParseError: If the file does not exist or osmium fails to read it.
    """
    source = Path(path)
    if not source.is_file():
        msg = f"OSM extract not found: {source}"
        raise OsmParseError(msg)

    accumulator = Accumulator()
    handler = AccumulatingHandler(accumulator)

    started = time.monotonic()
    logger.info("Parsing OSM extract | file=%s", source)
    try:
        handler.apply_file(str(source))
    except RuntimeError as exc:
        msg = f"Failed to read OSM extract {source}: {exc}"
        raise OsmParseError(msg) from exc

    extract = accumulator.finalize()
    logger.info(
        "OSM extract parsed | file=%s | invalid_nodes=%d | duration=%.1fs",
        source,
        handler.invalid_nodes,
        time.monotonic() - started,
    )
    return extract
