"""
specmap/schemas package marker.
"""

from specmap.schemas.dashboard import (
    DashboardResponse,
    GroupedProjectResponse,
    RecordResponse,
    SummaryResponse,
)
from specmap.schemas.ingestion import IngestionSummaryResponse, ProgressResponse

__all__ = [
    "DashboardResponse",
    "GroupedProjectResponse",
    "IngestionSummaryResponse",
    "ProgressResponse",
    "RecordResponse",
    "SummaryResponse",
]
