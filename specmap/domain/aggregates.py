"""
specmap/domain/aggregates.py

Derived views computed by the aggregation engine.

Every object here is a pure recomputation from a record set plus the
active filters. Instances are frozen; a change in the source records
means re-deriving, never editing a view in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from specmap.domain.canonical_record import CanonicalRecord


class ProgressStage(str, Enum):
    """
    Coarse delivery stage parsed from the free-text progress label.
    """

    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CONFIRMATION = "confirmation"
    OTHER = "other"


@dataclass(frozen=True)
class SpecLineItem:
    product: str
    quantity: float
    amount: float


@dataclass(frozen=True)
class GroupedProject:
    """
    One project's rollup.

    Representative metadata comes from the first record seen for the
    project; ``total_amount`` always equals the sum of line-item amounts.
    """

    name: str
    address: str
    latitude: float | None
    longitude: float | None
    designer: str
    constructor: str
    progress: str
    stage: ProgressStage
    specs: tuple[SpecLineItem, ...]
    total_amount: float

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class RankedEntity:
    name: str
    amount: float


@dataclass(frozen=True)
class AggregateSummary:
    """
    Headline numbers for the filtered record set.
    """

    site_count: int
    total_spec: float
    top_constructors: tuple[RankedEntity, ...]
    top_designers: tuple[RankedEntity, ...]
    missing_coordinates: int


@dataclass(frozen=True)
class TrendPoint:
    label: str
    value: float


@dataclass(frozen=True)
class TrendSeries:
    """
    Year, month and top-designer spec totals.
    """

    year: tuple[TrendPoint, ...]
    month: tuple[TrendPoint, ...]
    designer: tuple[TrendPoint, ...]
    reference_year: int


@dataclass(frozen=True)
class DashboardView:
    """
    Everything the presentation layer renders for one filter selection.
    """

    year: int
    month: int
    filtered_records: tuple[CanonicalRecord, ...]
    projects: tuple[GroupedProject, ...]
    summary: AggregateSummary
    trends: TrendSeries
    available_years: tuple[int, ...]
