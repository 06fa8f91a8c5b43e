from __future__ import annotations

import asyncio
import threading
import time

import pytest

from specmap.geocoding.rate_limiter import SequentialRateLimiter
from support import RecordingSleep


def test_sleeps_after_every_call(recording_sleep: RecordingSleep) -> None:
    limiter = SequentialRateLimiter(delay_seconds=0.8, sleep=recording_sleep)

    async def scenario() -> list[int]:
        return [await limiter.run(lambda value=value: value * 2) for value in range(3)]

    assert asyncio.run(scenario()) == [0, 2, 4]
    assert recording_sleep.delays == [0.8, 0.8, 0.8]
    assert limiter.calls_made == 3


def test_sleeps_even_when_call_raises(recording_sleep: RecordingSleep) -> None:
    limiter = SequentialRateLimiter(delay_seconds=1.0, sleep=recording_sleep)

    def boom() -> None:
        raise ValueError("upstream down")

    with pytest.raises(ValueError):
        asyncio.run(limiter.run(boom))
    assert recording_sleep.delays == [1.0]


def test_concurrent_submissions_never_overlap() -> None:
    state = {"in_flight": 0, "max_in_flight": 0}
    lock = threading.Lock()
    order: list[int] = []

    def slow_call(index: int) -> int:
        with lock:
            state["in_flight"] += 1
            state["max_in_flight"] = max(state["max_in_flight"], state["in_flight"])
        time.sleep(0.01)
        with lock:
            state["in_flight"] -= 1
            order.append(index)
        return index

    async def scenario() -> list[int]:
        limiter = SequentialRateLimiter(delay_seconds=0.0)
        return await asyncio.gather(*(limiter.run(slow_call, index) for index in range(5)))

    assert asyncio.run(scenario()) == [0, 1, 2, 3, 4]
    assert state["max_in_flight"] == 1
    assert order == [0, 1, 2, 3, 4]


def test_next_call_waits_for_previous_delay() -> None:
    events: list[str] = []

    async def tracking_sleep(seconds: float) -> None:
        events.append("sleep-start")
        await asyncio.sleep(0)
        events.append("sleep-end")

    def call(name: str) -> None:
        events.append(name)

    async def scenario() -> None:
        limiter = SequentialRateLimiter(delay_seconds=0.7, sleep=tracking_sleep)
        await asyncio.gather(limiter.run(call, "first"), limiter.run(call, "second"))

    asyncio.run(scenario())
    assert events == ["first", "sleep-start", "sleep-end", "second", "sleep-start", "sleep-end"]


def test_negative_delay_is_clamped() -> None:
    assert SequentialRateLimiter(delay_seconds=-1.0).delay_seconds == 0.0
