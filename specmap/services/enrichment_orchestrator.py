"""
specmap/services/enrichment_orchestrator.py

Fills in missing coordinates by geocoding record addresses.

Flow
----
1. Pick candidates: records with no coordinates and a real address longer
   than the minimum length. Everything else passes through untouched.
2. Collect the distinct candidate addresses in first-seen order.
3. Look each address up, one at a time, through a fresh per-run
   ``GeocodeCache``. A progress event is emitted once per address.
4. Merge every resolved address back onto all candidates sharing it.

Step 3 is the only place the pipeline suspends. Its wall-clock cost is
(distinct addresses) x (request latency + pacing delay) with no overall
timeout and no cancellation.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from specmap.domain.canonical_record import PLACEHOLDER, CanonicalRecord
from specmap.geocoding.cache import GeocodeCache
from specmap.geocoding.client import GeocodingClient
from specmap.geocoding.rate_limiter import SequentialRateLimiter
from specmap.logging_utils import log_event

logger = logging.getLogger(__name__)

STATUS_STARTED = "Resolving project locations"
STATUS_COMPLETE = "Location data synchronized"


@dataclass(frozen=True)
class ProgressEvent:
    status: str
    percent: int


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class EnrichmentResult:
    """
    Enriched records plus lookup counters for the run.
    """

    records: list[CanonicalRecord]
    addresses_total: int
    addresses_resolved: int
    records_enriched: int
    lookups_failed: int


def is_geocode_candidate(record: CanonicalRecord, *, min_address_length: int) -> bool:
    return (
        record.latitude is None
        and record.longitude is None
        and record.address != PLACEHOLDER
        and len(record.address) > min_address_length
    )


def distinct_addresses(records: Sequence[CanonicalRecord]) -> list[str]:
    """
    Unique addresses in first-seen order.
    """

    return list(dict.fromkeys(record.address for record in records))


class EnrichmentOrchestrator:
    """
    Drives the geocode cache over one record set and merges results back.
    """

    def __init__(
        self,
        *,
        client: GeocodingClient,
        limiter: SequentialRateLimiter,
        min_address_length: int = 5,
        enabled: bool = True,
    ) -> None:
        self._client = client
        self._limiter = limiter
        self._min_address_length = min_address_length
        self._enabled = enabled

    def new_cache(self) -> GeocodeCache:
        return GeocodeCache(client=self._client, limiter=self._limiter)

    def close(self) -> None:
        self._client.close()

    async def enrich(
        self,
        records: Sequence[CanonicalRecord],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> EnrichmentResult:
        emit = on_progress or (lambda event: None)
        emit(ProgressEvent(status=STATUS_STARTED, percent=0))

        candidates = [
            record
            for record in records
            if is_geocode_candidate(record, min_address_length=self._min_address_length)
        ]
        addresses = distinct_addresses(candidates) if self._enabled else []
        total = len(addresses)

        cache = self.new_cache()
        for index, address in enumerate(addresses):
            emit(
                ProgressEvent(
                    status=f"Geocoding addresses ({index + 1}/{total})",
                    percent=(100 * index) // total,
                )
            )
            await cache.lookup(address)

        candidate_ids = {record.id for record in candidates}
        enriched: list[CanonicalRecord] = []
        records_enriched = 0
        for record in records:
            coords = cache.cached(record.address) if record.id in candidate_ids else None
            if coords is None:
                enriched.append(record)
                continue
            enriched.append(dataclasses.replace(record, latitude=coords.lat, longitude=coords.lon))
            records_enriched += 1

        result = EnrichmentResult(
            records=enriched,
            addresses_total=total,
            addresses_resolved=len(cache.resolved()),
            records_enriched=records_enriched,
            lookups_failed=cache.failures,
        )
        log_event(
            logger,
            logging.INFO,
            "enrichment_completed",
            candidates=len(candidates),
            addresses_total=result.addresses_total,
            addresses_resolved=result.addresses_resolved,
            records_enriched=result.records_enriched,
            lookups_failed=result.lookups_failed,
        )
        emit(ProgressEvent(status=STATUS_COMPLETE, percent=100))
        return result
