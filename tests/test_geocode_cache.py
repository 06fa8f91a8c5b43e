from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import requests

from specmap.config import GeocodingSettings
from specmap.domain.canonical_record import Coordinates
from specmap.geocoding.cache import GeocodeCache
from specmap.geocoding.client import GeocodeRequestError, GeocodingClient
from specmap.geocoding.rate_limiter import SequentialRateLimiter
from support import RecordingSleep, ScriptedGeocodingClient

SEOUL = Coordinates(lat=37.5665, lon=126.978)


def _cache(client: ScriptedGeocodingClient, sleep: RecordingSleep) -> GeocodeCache:
    return GeocodeCache(
        client=client,  # type: ignore[arg-type]
        limiter=SequentialRateLimiter(delay_seconds=1.0, sleep=sleep),
    )


def test_repeated_address_is_looked_up_once(recording_sleep: RecordingSleep) -> None:
    client = ScriptedGeocodingClient({"Seoul City Hall": SEOUL})
    cache = _cache(client, recording_sleep)

    async def scenario() -> list[Coordinates | None]:
        return [await cache.lookup("Seoul City Hall") for _ in range(4)]

    assert asyncio.run(scenario()) == [SEOUL] * 4
    assert client.calls == ["Seoul City Hall"]
    assert cache.calls_made == 1
    assert recording_sleep.delays == [1.0]


def test_simultaneous_requests_share_one_call(recording_sleep: RecordingSleep) -> None:
    client = ScriptedGeocodingClient({"Seoul City Hall": SEOUL})
    cache = _cache(client, recording_sleep)

    async def scenario() -> list[Coordinates | None]:
        return await asyncio.gather(*(cache.lookup("Seoul City Hall") for _ in range(5)))

    assert asyncio.run(scenario()) == [SEOUL] * 5
    assert len(client.calls) == 1


def test_failures_are_cached_as_misses(recording_sleep: RecordingSleep) -> None:
    client = ScriptedGeocodingClient(
        {
            "empty street 1": None,
            "broken street 2": GeocodeRequestError("HTTP 500"),
            "Seoul City Hall": SEOUL,
        }
    )
    cache = _cache(client, recording_sleep)

    async def scenario() -> list[Coordinates | None]:
        results = []
        for address in ("empty street 1", "broken street 2", "Seoul City Hall", "broken street 2"):
            results.append(await cache.lookup(address))
        return results

    assert asyncio.run(scenario()) == [None, None, SEOUL, None]
    assert client.calls == ["empty street 1", "broken street 2", "Seoul City Hall"]
    assert cache.failures == 1
    assert cache.resolved() == {"Seoul City Hall": SEOUL}
    assert "broken street 2" in cache
    assert len(cache) == 3


def test_failure_does_not_stop_later_lookups(recording_sleep: RecordingSleep) -> None:
    client = ScriptedGeocodingClient({"Seoul City Hall": SEOUL})
    cache = _cache(client, recording_sleep)

    async def scenario() -> list[Coordinates | None]:
        return [await cache.lookup("unknown address"), await cache.lookup("Seoul City Hall")]

    assert asyncio.run(scenario()) == [None, SEOUL]
    assert recording_sleep.delays == [1.0, 1.0]


def test_misses_are_retried_by_a_new_run(recording_sleep: RecordingSleep) -> None:
    client = ScriptedGeocodingClient({"flaky address": GeocodeRequestError("timeout")})

    asyncio.run(_cache(client, recording_sleep).lookup("flaky address"))
    client.answers["flaky address"] = SEOUL
    second = asyncio.run(_cache(client, recording_sleep).lookup("flaky address"))

    assert second == SEOUL
    assert client.calls == ["flaky address", "flaky address"]


def test_cached_returns_none_for_unknown_address(recording_sleep: RecordingSleep) -> None:
    cache = _cache(ScriptedGeocodingClient(), recording_sleep)
    assert cache.cached("never asked") is None


def test_works_with_real_client_and_mocked_session(recording_sleep: RecordingSleep) -> None:
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = [{"lat": "37.5665", "lon": "126.9780"}]
    session = MagicMock(spec=requests.Session)
    session.get.return_value = response
    client = GeocodingClient(settings=GeocodingSettings(), session=session)
    cache = GeocodeCache(client=client, limiter=SequentialRateLimiter(delay_seconds=1.0, sleep=recording_sleep))

    async def scenario() -> list[Coordinates | None]:
        return [await cache.lookup("Seoul City Hall") for _ in range(3)]

    assert asyncio.run(scenario()) == [SEOUL] * 3
    assert session.get.call_count == 1
