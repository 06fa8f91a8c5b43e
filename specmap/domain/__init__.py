"""
specmap/domain package marker.
"""

from specmap.domain.aggregates import (
    AggregateSummary,
    DashboardView,
    GroupedProject,
    ProgressStage,
    RankedEntity,
    SpecLineItem,
    TrendPoint,
    TrendSeries,
)
from specmap.domain.canonical_record import (
    PLACEHOLDER,
    UNKNOWN_PERIOD,
    CanonicalRecord,
    Coordinates,
    Dataset,
    IngestionSummary,
    NormalizationResult,
    RawRecord,
)

__all__ = [
    "AggregateSummary",
    "CanonicalRecord",
    "Coordinates",
    "DashboardView",
    "Dataset",
    "GroupedProject",
    "IngestionSummary",
    "NormalizationResult",
    "PLACEHOLDER",
    "ProgressStage",
    "RankedEntity",
    "RawRecord",
    "SpecLineItem",
    "TrendPoint",
    "TrendSeries",
    "UNKNOWN_PERIOD",
]
