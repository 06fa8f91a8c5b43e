"""
Sequential rate-limited task runner for outbound geocoding calls.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]


class SequentialRateLimiter:
    """
    Single-worker runner: one call at a time, then a mandatory pause.

    Callers queue on an ``asyncio.Lock`` (FIFO), so calls are issued in the
    order they were submitted. The lock is held through the post-call delay;
    the next call cannot start until the delay has fully elapsed, whether the
    previous call succeeded or raised.
    """

    def __init__(self, *, delay_seconds: float, sleep: SleepFunc | None = None) -> None:
        self._delay_seconds = max(0.0, delay_seconds)
        self._sleep = sleep or asyncio.sleep
        self._lock = asyncio.Lock()
        self._calls_made = 0

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    @property
    def calls_made(self) -> int:
        return self._calls_made

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run a blocking callable in a worker thread under the pacing rules.
        """

        async with self._lock:
            try:
                self._calls_made += 1
                return await asyncio.to_thread(func, *args, **kwargs)
            finally:
                if self._delay_seconds > 0:
                    await self._sleep(self._delay_seconds)
