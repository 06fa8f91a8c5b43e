"""
specmap/geocoding/cache.py

Per-run address cache in front of the rate-limited geocoding client.
"""

from __future__ import annotations

import asyncio
import logging

from specmap.domain.canonical_record import Coordinates
from specmap.geocoding.client import GeocodeRequestError, GeocodingClient
from specmap.geocoding.rate_limiter import SequentialRateLimiter
from specmap.logging_utils import log_event

logger = logging.getLogger(__name__)


class GeocodeCache:
    """
    Looks each distinct address up at most once per ingestion run.

    Failed and empty lookups are cached as a miss (``None``) for the rest
    of the run; a fresh instance is built for every run, so misses are
    retried next time. Callers asking for an address that is already being
    looked up wait on the same pending task instead of issuing a second call.
    """

    def __init__(self, *, client: GeocodingClient, limiter: SequentialRateLimiter) -> None:
        self._client = client
        self._limiter = limiter
        self._lookups: dict[str, asyncio.Task[Coordinates | None]] = {}
        self._calls_made = 0
        self._failures = 0

    @property
    def calls_made(self) -> int:
        return self._calls_made

    @property
    def failures(self) -> int:
        return self._failures

    def __contains__(self, address: object) -> bool:
        return address in self._lookups

    def __len__(self) -> int:
        return len(self._lookups)

    async def lookup(self, address: str) -> Coordinates | None:
        task = self._lookups.get(address)
        if task is None:
            task = asyncio.ensure_future(self._fetch(address))
            self._lookups[address] = task
        return await task

    def cached(self, address: str) -> Coordinates | None:
        """
        Return a finished lookup's result without issuing a call.
        """

        task = self._lookups.get(address)
        if task is None or not task.done():
            return None
        return task.result()

    def resolved(self) -> dict[str, Coordinates]:
        """
        Snapshot of every finished lookup that produced coordinates.
        """

        results: dict[str, Coordinates] = {}
        for address, task in self._lookups.items():
            if task.done() and task.result() is not None:
                results[address] = task.result()
        return results

    async def _fetch(self, address: str) -> Coordinates | None:
        self._calls_made += 1
        try:
            coords = await self._limiter.run(self._client.search, address)
        except GeocodeRequestError as exc:
            self._failures += 1
            log_event(logger, logging.WARNING, "geocode_lookup_failed", address=address, error=str(exc))
            return None

        if coords is None:
            log_event(logger, logging.INFO, "geocode_no_result", address=address)
        else:
            log_event(
                logger,
                logging.DEBUG,
                "geocode_resolved",
                address=address,
                lat=coords.lat,
                lon=coords.lon,
            )
        return coords
