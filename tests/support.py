"""
tests/support.py

Test helpers: record factory, scripted geocoding client, no-wait sleep.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any

from specmap.domain.canonical_record import CanonicalRecord, Coordinates
from specmap.geocoding.client import GeocodeRequestError
from specmap.geocoding.rate_limiter import SequentialRateLimiter
from specmap.services.enrichment_orchestrator import EnrichmentOrchestrator

_ids = itertools.count(1)


def make_record(**overrides: Any) -> CanonicalRecord:
    """Build a canonical record with sensible defaults."""
    values: dict[str, Any] = {
        "id": f"rec-{next(_ids)}",
        "project_name": "서울 데이터센터 A",
        "year": 2024,
        "month": 5,
        "progress": "납품중",
        "address": "서울특별시 중구 세종대로 110",
        "latitude": None,
        "longitude": None,
        "designer": "A 설계사",
        "constructor": "삼성물산",
        "product_name": "항온항습기",
        "quantity": 20.0,
        "spec_amount": 500.0,
    }
    values.update(overrides)
    return CanonicalRecord(**values)


class ScriptedGeocodingClient:
    """
    Stand-in for GeocodingClient.search with canned answers per address.

    A value of ``None`` means "no hits"; an Exception instance is raised.
    Unknown addresses raise GeocodeRequestError. Tracks overlapping calls.
    """

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})
        self.calls: list[str] = []
        self.max_in_flight = 0
        self.closed = False
        self._in_flight = 0
        self._lock = threading.Lock()

    def search(self, address: str) -> Coordinates | None:
        with self._lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
            self.calls.append(address)
        try:
            if address not in self.answers:
                raise GeocodeRequestError(f"no scripted answer for {address!r}")
            answer = self.answers[address]
            if isinstance(answer, Exception):
                raise answer
            return answer
        finally:
            with self._lock:
                self._in_flight -= 1

    def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def build_enricher(
    client: ScriptedGeocodingClient,
    sleep: RecordingSleep,
    *,
    delay_seconds: float = 1.0,
    enabled: bool = True,
) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(
        client=client,  # type: ignore[arg-type]
        limiter=SequentialRateLimiter(delay_seconds=delay_seconds, sleep=sleep),
        min_address_length=5,
        enabled=enabled,
    )
