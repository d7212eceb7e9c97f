"""
In-memory TTL cache for provider lookups.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple


class QuoteCache:
    """
    Time-bounded memoization of provider results.

    Each entry carries its own expiry so quotes (short TTL) and earnings
    annotations (long TTL) can share one cache. Failures are never stored.
    """

    def __init__(
        self,
        default_ttl_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            # pop with default: a concurrent invalidate may have won
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        self._entries[key] = (self._clock() + ttl, value)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or every entry when called without a key."""
        if key is None:
            self._entries.clear()
            return
        self._entries.pop(key, None)

    def invalidate_symbol(self, symbol: str) -> None:
        """Drop every entry stored for ``symbol`` under any ``<kind>:<symbol>`` key."""
        suffix = f":{symbol}"
        for key in [k for k in self._entries if k == symbol or k.endswith(suffix)]:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
