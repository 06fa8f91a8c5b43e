"""
specmap/domain/canonical_record.py

Domain models produced by normalization and enrichment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

PLACEHOLDER = "-"
"""Display value for absent free-text fields."""

UNKNOWN_PERIOD = 0
"""Year/month sentinel meaning "unknown" on records and "all" on filters."""

RawRecord = Mapping[str, Any]


@dataclass(frozen=True)
class Coordinates:
    """
    One resolved latitude/longitude pair.
    """

    lat: float
    lon: float


@dataclass(frozen=True)
class CanonicalRecord:
    """
    One procurement/delivery line item in canonical shape.

    ``latitude`` and ``longitude`` are either both set or both ``None``.
    """

    id: str
    project_name: str
    year: int
    month: int
    progress: str
    address: str
    latitude: float | None
    longitude: float | None
    designer: str
    constructor: str
    product_name: str
    quantity: float
    spec_amount: float

    def __post_init__(self) -> None:
        if not self.project_name:
            raise ValueError("project_name must be non-empty.")
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be both set or both None.")

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class NormalizationResult:
    """
    Normalizer output plus the count of rows dropped for an empty project name.
    """

    records: list[CanonicalRecord]
    rows_read: int
    rows_dropped: int


@dataclass(frozen=True)
class Dataset:
    """
    One committed, fully enriched record set.
    """

    records: tuple[CanonicalRecord, ...] = ()
    loaded_at: datetime | None = None
    source_name: str | None = None


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run ingestion summary.
    """

    source_name: str | None
    rows_read: int
    rows_dropped: int
    records_committed: int
    addresses_looked_up: int
    addresses_resolved: int
    records_enriched: int
    warnings: list[str] = field(default_factory=list)
