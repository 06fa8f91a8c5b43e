"""
specmap/schemas/ingestion.py

Response schemas for upload and progress endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from specmap.domain.canonical_record import IngestionSummary


class IngestionSummaryResponse(BaseModel):
    """
    API response model for one completed ingestion run.
    """

    source_name: str | None = None
    rows_read: int = Field(..., ge=0)
    rows_dropped: int = Field(..., ge=0)
    records_committed: int = Field(..., ge=0)
    addresses_looked_up: int = Field(..., ge=0)
    addresses_resolved: int = Field(..., ge=0)
    records_enriched: int = Field(..., ge=0)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, summary: IngestionSummary) -> IngestionSummaryResponse:
        return cls(
            source_name=summary.source_name,
            rows_read=summary.rows_read,
            rows_dropped=summary.rows_dropped,
            records_committed=summary.records_committed,
            addresses_looked_up=summary.addresses_looked_up,
            addresses_resolved=summary.addresses_resolved,
            records_enriched=summary.records_enriched,
            warnings=list(summary.warnings),
        )


class ProgressResponse(BaseModel):
    """
    API response model for the latest pipeline progress event.
    """

    status: str
    percent: int = Field(..., ge=0, le=100)
    is_running: bool
    last_error: str | None = None
