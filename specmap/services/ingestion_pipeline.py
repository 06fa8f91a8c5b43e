"""
specmap/services/ingestion_pipeline.py

Pipeline context tying decode, normalization, enrichment and aggregation
together for one process.

Only one ingestion run may be active per context. A second run started
while one is in flight is rejected with IngestionInProgressError; the
running batch continues unaffected. A run commits its dataset only after
enrichment has finished, so a failed run (decode error or anything raised
later) leaves the previously committed dataset in place.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from specmap.config import get_geocoding_settings
from specmap.decoders.spreadsheet import decode_spreadsheet
from specmap.domain.aggregates import DashboardView
from specmap.domain.canonical_record import (
    UNKNOWN_PERIOD,
    CanonicalRecord,
    Dataset,
    IngestionSummary,
    RawRecord,
)
from specmap.geocoding.client import GeocodingClient
from specmap.geocoding.rate_limiter import SequentialRateLimiter
from specmap.logging_utils import log_event
from specmap.mappers.record_normalizer import RecordNormalizer
from specmap.services.aggregation_service import AggregationService, get_aggregation_service
from specmap.services.enrichment_orchestrator import (
    EnrichmentOrchestrator,
    ProgressCallback,
    ProgressEvent,
)

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes, str], list[dict[str, Any]]]

STATUS_FAILED = "Ingestion failed"


class IngestionInProgressError(RuntimeError):
    """
    Raised when an ingestion run is requested while another one is active.
    """


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class PipelineContext:
    """
    Owns the current dataset and runs ingestions against it.
    """

    def __init__(
        self,
        *,
        enricher: EnrichmentOrchestrator,
        normalizer: RecordNormalizer | None = None,
        aggregator: AggregationService | None = None,
        decoder: Decoder = decode_spreadsheet,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._enricher = enricher
        self._normalizer = normalizer or RecordNormalizer()
        self._aggregator = aggregator or AggregationService()
        self._decoder = decoder
        self._clock = clock
        self._dataset = Dataset()
        self._running = False
        self._progress = ProgressEvent(status="", percent=0)
        self._last_error: str | None = None

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def records(self) -> tuple[CanonicalRecord, ...]:
        return self._dataset.records

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def progress(self) -> ProgressEvent:
        return self._progress

    @property
    def last_error(self) -> str | None:
        return self._last_error

    async def ingest_upload(
        self,
        *,
        content: bytes,
        filename: str,
        on_progress: ProgressCallback | None = None,
    ) -> IngestionSummary:
        """
        Decode an uploaded spreadsheet and ingest its rows.

        Decoder failures propagate as SpreadsheetDecodeError and commit nothing.
        """

        self._begin_run()
        try:
            self._report(ProgressEvent(status=f"Reading '{filename}'", percent=0), on_progress)
            raw_records = await asyncio.to_thread(self._decoder, content, filename)
            return await self._run(raw_records, source_name=filename, on_progress=on_progress)
        except Exception as exc:
            self._fail_run(exc, source_name=filename, on_progress=on_progress)
            raise
        finally:
            self._running = False

    async def ingest_records(
        self,
        raw_records: Iterable[RawRecord],
        *,
        source_name: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> IngestionSummary:
        """
        Ingest already decoded rows.
        """

        self._begin_run()
        try:
            return await self._run(raw_records, source_name=source_name, on_progress=on_progress)
        except Exception as exc:
            self._fail_run(exc, source_name=source_name, on_progress=on_progress)
            raise
        finally:
            self._running = False

    def dashboard(self, *, year: int = UNKNOWN_PERIOD, month: int = UNKNOWN_PERIOD) -> DashboardView:
        return self._aggregator.build_dashboard(self._dataset.records, year=year, month=month)

    def close(self) -> None:
        self._enricher.close()

    def _begin_run(self) -> None:
        # Check-and-set happens before the first await, so it cannot interleave.
        if self._running:
            raise IngestionInProgressError("An ingestion run is already in progress.")
        self._running = True
        self._last_error = None

    def _fail_run(
        self,
        exc: Exception,
        *,
        source_name: str | None,
        on_progress: ProgressCallback | None,
    ) -> None:
        self._last_error = str(exc)
        self._report(ProgressEvent(status=STATUS_FAILED, percent=100), on_progress)
        log_event(
            logger,
            logging.WARNING,
            "ingestion_failed",
            source_name=source_name,
            error=str(exc),
            kept_records=len(self._dataset.records),
        )

    def _report(self, event: ProgressEvent, on_progress: ProgressCallback | None) -> None:
        self._progress = event
        if on_progress is not None:
            on_progress(event)

    async def _run(
        self,
        raw_records: Iterable[RawRecord],
        *,
        source_name: str | None,
        on_progress: ProgressCallback | None,
    ) -> IngestionSummary:
        normalized = self._normalizer.normalize(raw_records)
        enrichment = await self._enricher.enrich(
            normalized.records,
            on_progress=lambda event: self._report(event, on_progress),
        )

        self._dataset = Dataset(
            records=tuple(enrichment.records),
            loaded_at=self._clock(),
            source_name=source_name,
        )

        warnings: list[str] = []
        if normalized.rows_dropped:
            warnings.append(f"{normalized.rows_dropped} rows skipped without a project name.")
        unresolved = enrichment.addresses_total - enrichment.addresses_resolved
        if unresolved:
            warnings.append(f"{unresolved} addresses could not be geocoded.")

        summary = IngestionSummary(
            source_name=source_name,
            rows_read=normalized.rows_read,
            rows_dropped=normalized.rows_dropped,
            records_committed=len(enrichment.records),
            addresses_looked_up=enrichment.addresses_total,
            addresses_resolved=enrichment.addresses_resolved,
            records_enriched=enrichment.records_enriched,
            warnings=warnings,
        )
        log_event(
            logger,
            logging.INFO,
            "ingestion_committed",
            source_name=source_name,
            rows_read=summary.rows_read,
            rows_dropped=summary.rows_dropped,
            records_committed=summary.records_committed,
            records_enriched=summary.records_enriched,
        )
        return summary


def build_pipeline_context() -> PipelineContext:
    """
    Wire a pipeline context from env-driven settings.
    """

    geocoding = get_geocoding_settings()
    enricher = EnrichmentOrchestrator(
        client=GeocodingClient(settings=geocoding),
        limiter=SequentialRateLimiter(delay_seconds=geocoding.delay_seconds),
        min_address_length=geocoding.min_address_length,
        enabled=geocoding.enabled,
    )
    return PipelineContext(
        enricher=enricher,
        aggregator=get_aggregation_service(),
    )
