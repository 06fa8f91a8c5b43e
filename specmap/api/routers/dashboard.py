"""
specmap/api/routers/dashboard.py

Read-only endpoints over the committed dataset.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from specmap.api.dependencies import get_pipeline
from specmap.schemas.dashboard import DashboardResponse, RecordResponse
from specmap.services.ingestion_pipeline import PipelineContext

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    year: int = Query(default=0, ge=0, description="Year filter; 0 means all years"),
    month: int = Query(default=0, ge=0, le=12, description="Month filter; 0 means all months"),
    pipeline: PipelineContext = Depends(get_pipeline),
) -> DashboardResponse:
    """
    Summary, project rollups and trends for one filter selection.
    """

    dataset = pipeline.dataset
    view = pipeline.dashboard(year=year, month=month)
    return DashboardResponse.from_domain(
        view,
        loaded_at=dataset.loaded_at,
        source_name=dataset.source_name,
    )


@router.get("/records", response_model=list[RecordResponse])
def list_records(pipeline: PipelineContext = Depends(get_pipeline)) -> list[RecordResponse]:
    """
    Every normalized and enriched record of the committed dataset.
    """

    return [RecordResponse.from_domain(record) for record in pipeline.records]
