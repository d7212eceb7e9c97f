"""
Minimum-interval pacing for quota-limited providers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforces a minimum gap between permitted calls.

    ``wait_until_allowed`` suspends the caller until ``min_interval_seconds``
    have elapsed since the previous permitted call, then records the new
    call time. Waiters are serialized by a lock so two tasks sharing the
    limiter cannot both observe the same "last call" timestamp.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name: str = "",
    ):
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must be >= 0")
        self.min_interval_seconds = min_interval_seconds
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def last_call(self) -> Optional[float]:
        return self._last_call

    async def wait_until_allowed(self) -> None:
        async with self._lock:
            if self._last_call is not None and self.min_interval_seconds > 0:
                elapsed = self._clock() - self._last_call
                remaining = self.min_interval_seconds - elapsed
                if remaining > 0:
                    logger.debug("Rate limiter %s sleeping %.2fs", self.name or "-", remaining)
                    await self._sleep(remaining)
            self._last_call = self._clock()

    def reset(self) -> None:
        self._last_call = None
