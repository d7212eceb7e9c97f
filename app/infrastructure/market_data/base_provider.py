"""
Shared quote-fetch flow for provider adapters.

Subclasses translate symbols and parse one upstream response shape;
this base supplies caching, pacing, timeouts and the never-failing
batch fetch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from app.infrastructure.market_data.errors import (
    ConfigurationError,
    ProviderDataError,
    ProviderError,
    ProviderNetworkError,
    ProviderQuotaExceeded,
)
from app.infrastructure.market_data.quote_cache import QuoteCache
from app.infrastructure.market_data.rate_limiter import RateLimiter
from app.infrastructure.market_data.types import Quote

logger = logging.getLogger(__name__)


class BaseQuoteProvider:
    """
    Template for a single upstream quote source.

    Lookup order for ``get_quote``: cache, then rate limiter, then network.
    Providers with a rate limiter fetch batches strictly one symbol at a
    time; providers without one overlap requests, each started
    ``stagger_seconds`` after the previous.
    """

    name = "base"
    display_name = "Base"
    cache_prefix = "quote"

    def __init__(
        self,
        cache: Optional[QuoteCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        stagger_seconds: float = 0.0,
        request_timeout: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.cache = cache if cache is not None else QuoteCache()
        self.rate_limiter = rate_limiter
        self.stagger_seconds = stagger_seconds
        self.request_timeout = request_timeout
        self._sleep = sleep

    # ------------------------------------------------------------------
    # HOOKS
    # ------------------------------------------------------------------

    def is_configured(self) -> bool:
        return True

    def to_provider_symbol(self, symbol: str) -> str:
        return symbol

    async def _fetch_quote(self, symbol: str) -> Quote:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _cache_key(self, symbol: str) -> str:
        return f"{self.cache_prefix}:{symbol}"

    async def _with_timeout(self, awaitable: Awaitable, symbol: str):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.request_timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderNetworkError(
                f"{self.display_name} timed out after {self.request_timeout}s",
                provider=self.name,
                symbol=symbol,
            ) from exc

    async def _quote_or_placeholder(self, symbol: str) -> Quote:
        try:
            return await self.get_quote(symbol)
        except ProviderQuotaExceeded as exc:
            logger.warning("%s rate limit reached for %s: %s", self.display_name, symbol, exc)
        except ProviderDataError as exc:
            logger.info("%s has no usable data for %s: %s", self.display_name, symbol, exc)
        except ProviderError as exc:
            logger.info("%s failed for %s: %s", self.display_name, symbol, exc)
        except Exception:
            logger.exception("Unexpected %s error for %s", self.display_name, symbol)
        return Quote.placeholder(symbol)

    async def _staggered(self, index: int, symbol: str) -> Quote:
        if index and self.stagger_seconds > 0:
            await self._sleep(index * self.stagger_seconds)
        return await self._quote_or_placeholder(symbol)

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    async def get_quote(self, symbol: str) -> Quote:
        key = self._cache_key(symbol)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if not self.is_configured():
            raise ConfigurationError(
                f"{self.display_name} credentials not configured",
                provider=self.name,
                symbol=symbol,
            )

        if self.rate_limiter is not None:
            await self.rate_limiter.wait_until_allowed()

        quote = await self._with_timeout(self._fetch_quote(symbol), symbol)
        if not quote.is_available:
            raise ProviderDataError(
                f"{self.display_name} returned no price",
                provider=self.name,
                symbol=symbol,
            )

        self.cache.set(key, quote)
        logger.debug("%s: %s = %s", self.display_name, symbol, quote.price)
        return quote

    async def get_multiple_quotes(self, symbols: List[str]) -> Dict[str, Quote]:
        ordered = list(dict.fromkeys(symbols))
        logger.info("Fetching %d quotes from %s", len(ordered), self.display_name)

        results: Dict[str, Quote] = {}
        if self.rate_limiter is not None or self.stagger_seconds <= 0:
            for symbol in ordered:
                results[symbol] = await self._quote_or_placeholder(symbol)
        else:
            quotes = await asyncio.gather(
                *(self._staggered(index, symbol) for index, symbol in enumerate(ordered))
            )
            results = dict(zip(ordered, quotes))

        fetched = sum(1 for quote in results.values() if quote.is_available)
        logger.info("%s completed: %d/%d quotes fetched", self.display_name, fetched, len(ordered))
        return results

    def clear_cache(self, symbol: Optional[str] = None) -> None:
        if symbol is None:
            self.cache.invalidate()
        else:
            self.cache.invalidate_symbol(symbol)
