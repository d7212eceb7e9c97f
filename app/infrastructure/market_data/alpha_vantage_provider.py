"""
Alpha Vantage Quote Provider
Primary live source; free tier allows 5 calls/minute, so every request
goes through a 12 second rate limiter.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

from app.infrastructure.market_data.base_provider import BaseQuoteProvider
from app.infrastructure.market_data.errors import (
    ProviderDataError,
    ProviderNetworkError,
    ProviderQuotaExceeded,
)
from app.infrastructure.market_data.rate_limiter import RateLimiter
from app.infrastructure.market_data.types import Quote, ZERO, to_decimal, to_int

logger = logging.getLogger(__name__)

_EXCHANGE_SUFFIX = re.compile(r"\.(NS|BO)$", re.IGNORECASE)


class AlphaVantageProvider(BaseQuoteProvider):
    name = "alpha_vantage"
    display_name = "Alpha Vantage"
    cache_prefix = "av"

    BASE_URL = "https://www.alphavantage.co/query"
    DEFAULT_MIN_INTERVAL_SECONDS = 12.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = BASE_URL,
        **kwargs,
    ):
        if kwargs.get("rate_limiter") is None:
            kwargs["rate_limiter"] = RateLimiter(self.DEFAULT_MIN_INTERVAL_SECONDS, name=self.name)
        super().__init__(**kwargs)
        self.api_key = (api_key or "").strip() or None
        self.base_url = base_url
        if not self.api_key:
            logger.warning("ALPHA_VANTAGE_API_KEY not set; Alpha Vantage will be skipped")

    def is_configured(self) -> bool:
        return self.api_key is not None

    def to_provider_symbol(self, symbol: str) -> str:
        """INFY.NS -> INFY (GLOBAL_QUOTE takes the bare ticker)."""
        return _EXCHANGE_SUFFIX.sub("", symbol)

    async def _request_json(self, params: dict) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.request_timeout) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            raise ProviderNetworkError(f"Alpha Vantage request failed: {exc}", provider=self.name) from exc

        if response.status_code == 429:
            raise ProviderQuotaExceeded("Alpha Vantage HTTP 429", provider=self.name)
        if response.status_code != 200:
            raise ProviderNetworkError(f"Alpha Vantage HTTP {response.status_code}", provider=self.name)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderDataError("Alpha Vantage returned invalid JSON", provider=self.name) from exc
        if not isinstance(payload, dict):
            raise ProviderDataError("Alpha Vantage returned unexpected payload", provider=self.name)
        return payload

    async def _fetch_quote(self, symbol: str) -> Quote:
        payload = await self._request_json(
            {
                "function": "GLOBAL_QUOTE",
                "symbol": self.to_provider_symbol(symbol),
                "apikey": self.api_key,
            }
        )

        # Throttling comes back as HTTP 200 with a "Note" (per-minute) or
        # "Information" (daily) message instead of data
        notice = payload.get("Note") or payload.get("Information")
        if notice:
            raise ProviderQuotaExceeded(str(notice), provider=self.name, symbol=symbol)

        if payload.get("Error Message"):
            raise ProviderDataError(str(payload["Error Message"]), provider=self.name, symbol=symbol)

        data = payload.get("Global Quote")
        if not isinstance(data, dict) or not data:
            raise ProviderDataError("No data available", provider=self.name, symbol=symbol)

        price = to_decimal(data.get("05. price"))
        return Quote(
            symbol=symbol,
            price=price if price is not None and price > 0 else ZERO,
            # GLOBAL_QUOTE carries neither P/E nor market cap
            pe_ratio=None,
            market_cap=None,
            volume=to_int(data.get("06. volume")) or None,
        )
