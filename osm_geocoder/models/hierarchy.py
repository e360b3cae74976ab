"""Derived administrative hierarchy: country → settlement → district.

The tree is rebuilt from scratch on every import run and is read-only
afterwards, so it can be shared with the lookup service while indexing
tasks are still running.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from osm_geocoder.core.exceptions import PipelineError
    from osm_geocoder.models.geometry import Polygon


@dataclass(frozen=True, slots=True)
class District:
    """A district boundary attached to exactly one settlement."""

    name: str
    polygon: Polygon


@dataclass(frozen=True, slots=True)
class Settlement:
    """A settlement (``place`` city/town/village/hamlet) and its districts.

    Attributes:
        name: ``name`` tag of the source relation.
        place_type: ``place`` tag value (e.g. ``"city"``).
        polygon: Assembled boundary ring.
        districts: Child districts in attachment order.
    """

    name: str
    place_type: str
    polygon: Polygon
    districts: tuple[District, ...] = ()


@dataclass(frozen=True, slots=True)
class Country:
    """The configured import country and its settlements."""

    name: str
    polygon: Polygon
    settlements: tuple[Settlement, ...] = ()

    @property
    def district_count(self) -> int:
        return sum(len(s.districts) for s in self.settlements)


@dataclass(frozen=True, slots=True)
class HierarchyBuildResult:
    """Outcome of one hierarchy build.

    Attributes:
        countries: Materialised countries (normally exactly one).
        skipped_relations: Boundary candidates dropped because their ring
            could not be assembled (no resolvable members).
        export_errors: Debug-export failures, one per affected country.
            These never abort the build.
    """

    countries: tuple[Country, ...] = ()
    skipped_relations: int = 0
    export_errors: tuple[PipelineError, ...] = field(default_factory=tuple)

    @property
    def settlement_count(self) -> int:
        return sum(len(c.settlements) for c in self.countries)

    @property
    def district_count(self) -> int:
        return sum(c.district_count for c in self.countries)
