"""
specmap/services/aggregation_service.py

Derived views over an enriched record set.

Every public function is a pure function of (records, year filter, month
filter): no caching, no mutation, identical input gives identical output.
The views are cheap enough to rebuild on every filter change.

Filter semantics
----------------
``year == 0`` / ``month == 0`` mean "all". Grouping, the summary and the
designer trend use the filtered set; the year trend always uses the full
set; the month trend uses the full set restricted to one reference year
(the active year filter, or the latest year present).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from functools import lru_cache

from specmap.config import get_aggregation_settings
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
from specmap.domain.canonical_record import PLACEHOLDER, UNKNOWN_PERIOD, CanonicalRecord

logger = logging.getLogger(__name__)

MONTHS: tuple[int, ...] = tuple(range(1, 13))

# Checked in order; the first keyword contained in the label wins.
_STAGE_KEYWORDS: tuple[tuple[str, ProgressStage], ...] = (
    ("납품중", ProgressStage.DELIVERING),
    ("납품완료", ProgressStage.DELIVERED),
    ("납품확인", ProgressStage.CONFIRMATION),
)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def filter_records(
    records: Iterable[CanonicalRecord],
    *,
    year: int = UNKNOWN_PERIOD,
    month: int = UNKNOWN_PERIOD,
) -> tuple[CanonicalRecord, ...]:
    return tuple(
        record
        for record in records
        if (year == UNKNOWN_PERIOD or record.year == year)
        and (month == UNKNOWN_PERIOD or record.month == month)
    )


def classify_progress(progress: str) -> ProgressStage:
    for keyword, stage in _STAGE_KEYWORDS:
        if keyword in (progress or ""):
            return stage
    return ProgressStage.OTHER


def group_projects(records: Iterable[CanonicalRecord]) -> tuple[GroupedProject, ...]:
    """
    Partition records by project name, in first-seen order.

    The first record of each project supplies its address, coordinates,
    designer, constructor and progress.
    """

    first_seen: dict[str, CanonicalRecord] = {}
    line_items: dict[str, list[SpecLineItem]] = {}
    for record in records:
        name = record.project_name
        if name not in first_seen:
            first_seen[name] = record
            line_items[name] = []
        line_items[name].append(
            SpecLineItem(
                product=record.product_name,
                quantity=record.quantity,
                amount=record.spec_amount,
            )
        )

    projects: list[GroupedProject] = []
    for name, head in first_seen.items():
        specs = tuple(line_items[name])
        projects.append(
            GroupedProject(
                name=name,
                address=head.address,
                latitude=head.latitude,
                longitude=head.longitude,
                designer=head.designer,
                constructor=head.constructor,
                progress=head.progress,
                stage=classify_progress(head.progress),
                specs=specs,
                total_amount=sum(item.amount for item in specs),
            )
        )
    return tuple(projects)


def mappable_projects(projects: Iterable[GroupedProject]) -> tuple[GroupedProject, ...]:
    return tuple(project for project in projects if project.has_coordinates)


def rank_entities(
    records: Iterable[CanonicalRecord],
    *,
    key: Callable[[CanonicalRecord], str],
    top_n: int,
    catch_all_label: str,
) -> tuple[RankedEntity, ...]:
    """
    Sum spec amounts per entity and keep the ``top_n`` largest.

    Placeholder or empty names collapse into ``catch_all_label``. Ties keep
    first-encountered order (``sorted`` is stable, also with ``reverse``).
    """

    totals: dict[str, float] = {}
    for record in records:
        name = key(record)
        if not name or name == PLACEHOLDER:
            name = catch_all_label
        totals[name] = totals.get(name, 0.0) + record.spec_amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return tuple(RankedEntity(name=name, amount=amount) for name, amount in ranked[:top_n])


def available_years(records: Iterable[CanonicalRecord]) -> tuple[int, ...]:
    return tuple(sorted({record.year for record in records if record.year != UNKNOWN_PERIOD}))


def year_trend(records: Sequence[CanonicalRecord]) -> tuple[TrendPoint, ...]:
    totals: dict[int, float] = {}
    for record in records:
        totals[record.year] = totals.get(record.year, 0.0) + record.spec_amount
    return tuple(TrendPoint(label=f"{year}년", value=totals[year]) for year in sorted(totals))


def reference_year(records: Sequence[CanonicalRecord], *, year: int = UNKNOWN_PERIOD) -> int:
    if year != UNKNOWN_PERIOD:
        return year
    return max((record.year for record in records), default=UNKNOWN_PERIOD)


def month_trend(records: Sequence[CanonicalRecord], *, year: int) -> tuple[TrendPoint, ...]:
    """
    Twelve zero-filled monthly buckets for one year; empty for no records.
    """

    if not records:
        return ()
    totals = dict.fromkeys(MONTHS, 0.0)
    for record in records:
        if record.year == year and record.month in totals:
            totals[record.month] += record.spec_amount
    return tuple(TrendPoint(label=f"{month}월", value=totals[month]) for month in MONTHS)


def designer_trend(
    records: Iterable[CanonicalRecord],
    *,
    top_n: int,
    catch_all_label: str,
) -> tuple[TrendPoint, ...]:
    ranked = rank_entities(
        records,
        key=lambda record: record.designer,
        top_n=top_n,
        catch_all_label=catch_all_label,
    )
    return tuple(TrendPoint(label=entity.name, value=entity.amount) for entity in ranked)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AggregationService:
    """
    Builds summaries, leaderboards and trends from one record set.

    Parameters
    ----------
    top_n:
        Leaderboard length for constructors, designers and the designer trend.
    catch_all_label:
        Bucket name used when an entity field holds the placeholder.
    """

    def __init__(self, *, top_n: int = 5, catch_all_label: str = "기타") -> None:
        self._top_n = max(1, top_n)
        self._catch_all_label = catch_all_label

    def top_constructors(self, records: Iterable[CanonicalRecord]) -> tuple[RankedEntity, ...]:
        return rank_entities(
            records,
            key=lambda record: record.constructor,
            top_n=self._top_n,
            catch_all_label=self._catch_all_label,
        )

    def top_designers(self, records: Iterable[CanonicalRecord]) -> tuple[RankedEntity, ...]:
        return rank_entities(
            records,
            key=lambda record: record.designer,
            top_n=self._top_n,
            catch_all_label=self._catch_all_label,
        )

    def summarize(
        self,
        filtered: Sequence[CanonicalRecord],
        projects: Sequence[GroupedProject] | None = None,
    ) -> AggregateSummary:
        """
        Headline numbers for an already filtered record set.
        """

        if projects is None:
            projects = group_projects(filtered)
        return AggregateSummary(
            site_count=len(projects),
            total_spec=sum(record.spec_amount for record in filtered),
            top_constructors=self.top_constructors(filtered),
            top_designers=self.top_designers(filtered),
            missing_coordinates=sum(1 for project in projects if not project.has_coordinates),
        )

    def trends(
        self,
        records: Sequence[CanonicalRecord],
        filtered: Sequence[CanonicalRecord],
        *,
        year: int = UNKNOWN_PERIOD,
    ) -> TrendSeries:
        ref_year = reference_year(records, year=year)
        return TrendSeries(
            year=year_trend(records),
            month=month_trend(records, year=ref_year),
            designer=designer_trend(
                filtered,
                top_n=self._top_n,
                catch_all_label=self._catch_all_label,
            ),
            reference_year=ref_year,
        )

    def build_dashboard(
        self,
        records: Sequence[CanonicalRecord],
        *,
        year: int = UNKNOWN_PERIOD,
        month: int = UNKNOWN_PERIOD,
    ) -> DashboardView:
        filtered = filter_records(records, year=year, month=month)
        projects = group_projects(filtered)
        view = DashboardView(
            year=year,
            month=month,
            filtered_records=filtered,
            projects=projects,
            summary=self.summarize(filtered, projects),
            trends=self.trends(records, filtered, year=year),
            available_years=available_years(records),
        )
        logger.debug(
            "Dashboard built year=%s month=%s records=%s filtered=%s projects=%s",
            year,
            month,
            len(records),
            len(filtered),
            len(projects),
        )
        return view


@lru_cache(maxsize=1)
def get_aggregation_service() -> AggregationService:
    """
    Build and cache the aggregation service with env-driven settings.
    """

    settings = get_aggregation_settings()
    return AggregationService(top_n=settings.top_n, catch_all_label=settings.catch_all_label)
