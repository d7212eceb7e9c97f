"""
Yahoo Finance Quote Provider
Tertiary live source and the earnings annotation lookup.
Async-safe via thread offloading.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Optional

import yfinance as yf
from yfinance.exceptions import YFRateLimitError

from app.infrastructure.market_data.base_provider import BaseQuoteProvider
from app.infrastructure.market_data.errors import (
    ProviderDataError,
    ProviderError,
    ProviderNetworkError,
    ProviderQuotaExceeded,
)
from app.infrastructure.market_data.types import Quote, ZERO, to_decimal, to_int

logger = logging.getLogger(__name__)


class YahooFinanceProvider(BaseQuoteProvider):
    """
    Yahoo symbols already use the ``.NS`` / ``.BO`` suffix form, so no
    translation is needed. No documented quota: requests overlap, each
    started half a second after the previous one.
    """

    name = "yahoo"
    display_name = "Yahoo Finance"
    cache_prefix = "quote"

    DEFAULT_STAGGER_SECONDS = 0.5
    DEFAULT_EARNINGS_TTL_SECONDS = 3600

    def __init__(self, earnings_ttl_seconds: float = DEFAULT_EARNINGS_TTL_SECONDS, **kwargs):
        kwargs.setdefault("stagger_seconds", self.DEFAULT_STAGGER_SECONDS)
        super().__init__(**kwargs)
        self.earnings_ttl_seconds = earnings_ttl_seconds

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _load_info(self, symbol: str) -> dict:
        """Blocking yfinance call; run in a worker thread."""
        return yf.Ticker(symbol).info or {}

    async def _info(self, symbol: str) -> dict:
        try:
            info = await self._with_timeout(
                asyncio.to_thread(self._load_info, self.to_provider_symbol(symbol)),
                symbol,
            )
        except ProviderError:
            raise
        except YFRateLimitError as exc:
            raise ProviderQuotaExceeded("Yahoo Finance rate limited", provider=self.name, symbol=symbol) from exc
        except Exception as exc:
            raise ProviderNetworkError(f"Yahoo Finance lookup failed: {exc}", provider=self.name, symbol=symbol) from exc

        if not isinstance(info, dict) or not info:
            raise ProviderDataError("Empty quote", provider=self.name, symbol=symbol)
        return info

    async def _fetch_quote(self, symbol: str) -> Quote:
        info = await self._info(symbol)
        price = to_decimal(info.get("regularMarketPrice"))
        if price is None:
            price = to_decimal(info.get("currentPrice"))
        return Quote(
            symbol=symbol,
            price=price if price is not None and price > 0 else ZERO,
            pe_ratio=to_decimal(info.get("trailingPE")) or None,
            market_cap=to_decimal(info.get("marketCap")) or None,
            volume=to_int(info.get("regularMarketVolume")) or None,
        )

    # ------------------------------------------------------------------
    # EARNINGS
    # ------------------------------------------------------------------

    async def get_earnings(self, symbol: str) -> Optional[str]:
        """
        Trailing-twelve-month EPS formatted for display, e.g. "₹63.39".

        Returns None when Yahoo has no EPS or the lookup fails; the two
        cases are not distinguished.
        """
        key = f"earnings:{symbol}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            info = await self._info(symbol)
        except ProviderError as exc:
            logger.debug("Earnings unavailable for %s: %s", symbol, exc)
            return None

        eps = to_decimal(info.get("epsTrailingTwelveMonths"))
        if eps is None:
            eps = to_decimal(info.get("trailingEps"))
        if not eps:
            return None

        earnings = f"₹{eps.quantize(Decimal('0.01'))}"
        self.cache.set(key, earnings, self.earnings_ttl_seconds)
        return earnings
