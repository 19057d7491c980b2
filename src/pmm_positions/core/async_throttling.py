"""Request pacing for shared public RPC endpoints."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable


class AsyncMinIntervalThrottler:
    """Hands out request slots at least ``min_interval_seconds`` apart.

    Runs for different owners may share one pooled connection, so slots are
    reserved under a lock in arrival order.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        *,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._min_interval_seconds = max(0.0, float(min_interval_seconds))
        self._clock = clock or time.monotonic
        self._sleep = sleeper or asyncio.sleep
        self._next_slot_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def min_interval_seconds(self) -> float:
        return self._min_interval_seconds

    @property
    def enabled(self) -> bool:
        return self._min_interval_seconds > 0

    async def wait(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            now = self._clock()
            if self._next_slot_at is not None and self._next_slot_at > now:
                await self._sleep(self._next_slot_at - now)
                now = self._clock()
            self._next_slot_at = now + self._min_interval_seconds

    def reset(self) -> None:
        self._next_slot_at = None


__all__ = [
    "AsyncMinIntervalThrottler",
]
