"""
specmap/schemas/dashboard.py

Response schemas for dashboard and record endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from specmap.domain.aggregates import (
    AggregateSummary,
    DashboardView,
    GroupedProject,
    ProgressStage,
    RankedEntity,
    TrendPoint,
)
from specmap.domain.canonical_record import CanonicalRecord


class RecordResponse(BaseModel):
    """
    API response model for one canonical record.
    """

    id: str
    project_name: str
    year: int
    month: int
    progress: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    designer: str
    constructor: str
    product_name: str
    quantity: float
    spec_amount: float

    @classmethod
    def from_domain(cls, record: CanonicalRecord) -> RecordResponse:
        return cls(
            id=record.id,
            project_name=record.project_name,
            year=record.year,
            month=record.month,
            progress=record.progress,
            address=record.address,
            latitude=record.latitude,
            longitude=record.longitude,
            designer=record.designer,
            constructor=record.constructor,
            product_name=record.product_name,
            quantity=record.quantity,
            spec_amount=record.spec_amount,
        )


class SpecLineItemResponse(BaseModel):
    product: str
    quantity: float
    amount: float


class GroupedProjectResponse(BaseModel):
    """
    API response model for one project rollup.
    """

    name: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    designer: str
    constructor: str
    progress: str
    stage: ProgressStage
    specs: list[SpecLineItemResponse] = Field(default_factory=list)
    total_amount: float

    @classmethod
    def from_domain(cls, project: GroupedProject) -> GroupedProjectResponse:
        return cls(
            name=project.name,
            address=project.address,
            latitude=project.latitude,
            longitude=project.longitude,
            designer=project.designer,
            constructor=project.constructor,
            progress=project.progress,
            stage=project.stage,
            specs=[
                SpecLineItemResponse(product=item.product, quantity=item.quantity, amount=item.amount)
                for item in project.specs
            ],
            total_amount=project.total_amount,
        )


class RankedEntityResponse(BaseModel):
    name: str
    amount: float

    @classmethod
    def from_domain(cls, entity: RankedEntity) -> RankedEntityResponse:
        return cls(name=entity.name, amount=entity.amount)


class TrendPointResponse(BaseModel):
    label: str
    value: float

    @classmethod
    def from_domain(cls, point: TrendPoint) -> TrendPointResponse:
        return cls(label=point.label, value=point.value)


class SummaryResponse(BaseModel):
    """
    API response model for headline dashboard numbers.
    """

    site_count: int = Field(..., ge=0)
    total_spec: float
    top_constructors: list[RankedEntityResponse] = Field(default_factory=list)
    top_designers: list[RankedEntityResponse] = Field(default_factory=list)
    missing_coordinates: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, summary: AggregateSummary) -> SummaryResponse:
        return cls(
            site_count=summary.site_count,
            total_spec=summary.total_spec,
            top_constructors=[RankedEntityResponse.from_domain(item) for item in summary.top_constructors],
            top_designers=[RankedEntityResponse.from_domain(item) for item in summary.top_designers],
            missing_coordinates=summary.missing_coordinates,
        )


class TrendsResponse(BaseModel):
    reference_year: int
    year: list[TrendPointResponse] = Field(default_factory=list)
    month: list[TrendPointResponse] = Field(default_factory=list)
    designer: list[TrendPointResponse] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    """
    API response model for one filtered dashboard view.
    """

    year: int = Field(..., ge=0)
    month: int = Field(..., ge=0, le=12)
    loaded_at: datetime | None = None
    source_name: str | None = None
    record_count: int = Field(..., ge=0)
    summary: SummaryResponse
    projects: list[GroupedProjectResponse] = Field(default_factory=list)
    trends: TrendsResponse
    available_years: list[int] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls,
        view: DashboardView,
        *,
        loaded_at: datetime | None,
        source_name: str | None,
    ) -> DashboardResponse:
        return cls(
            year=view.year,
            month=view.month,
            loaded_at=loaded_at,
            source_name=source_name,
            record_count=len(view.filtered_records),
            summary=SummaryResponse.from_domain(view.summary),
            projects=[GroupedProjectResponse.from_domain(project) for project in view.projects],
            trends=TrendsResponse(
                reference_year=view.trends.reference_year,
                year=[TrendPointResponse.from_domain(point) for point in view.trends.year],
                month=[TrendPointResponse.from_domain(point) for point in view.trends.month],
                designer=[TrendPointResponse.from_domain(point) for point in view.trends.designer],
            ),
            available_years=list(view.available_years),
        )
