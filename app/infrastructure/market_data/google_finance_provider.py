"""
Google Finance Quote Provider
Secondary live source. There is no public quote API, so the quote page is
fetched and parsed; requests are paced one second apart.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from app.infrastructure.market_data.base_provider import BaseQuoteProvider
from app.infrastructure.market_data.errors import (
    ProviderDataError,
    ProviderNetworkError,
    ProviderQuotaExceeded,
)
from app.infrastructure.market_data.rate_limiter import RateLimiter
from app.infrastructure.market_data.types import Quote, to_decimal

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[-+]?\d[\d,]*(?:\.\d+)?")
_MULTIPLIERS = {
    "K": Decimal("1e3"),
    "M": Decimal("1e6"),
    "B": Decimal("1e9"),
    "T": Decimal("1e12"),
}


def parse_number(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse display numbers such as "₹1,725.30", "25.86" or "7.14T INR".
    Returns None for "-" and other non-numeric cells.
    """
    if not text:
        return None
    match = _NUMBER.search(text)
    if not match:
        return None
    value = to_decimal(match.group(0))
    if value is None:
        return None
    rest = text[match.end():].strip()
    if rest[:1].upper() in _MULTIPLIERS:
        value *= _MULTIPLIERS[rest[:1].upper()]
    return value


class GoogleFinanceProvider(BaseQuoteProvider):
    name = "google"
    display_name = "Google Finance"
    cache_prefix = "gquote"

    BASE_URL = "https://www.google.com/finance"
    DEFAULT_MIN_INTERVAL_SECONDS = 1.0

    HEADERS = {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(self, base_url: str = BASE_URL, **kwargs):
        if kwargs.get("rate_limiter") is None:
            kwargs["rate_limiter"] = RateLimiter(self.DEFAULT_MIN_INTERVAL_SECONDS, name=self.name)
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    def to_provider_symbol(self, symbol: str) -> str:
        """
        INFY.NS -> NSE:INFY, INFY.BO -> BOM:INFY, AAPL -> NASDAQ:AAPL.
        Symbols with any other suffix are passed through unchanged.
        """
        if symbol.endswith(".NS"):
            return f"NSE:{symbol[:-3]}"
        if symbol.endswith(".BO"):
            return f"BOM:{symbol[:-3]}"
        if "." in symbol:
            return symbol
        return f"NASDAQ:{symbol}"

    def _quote_url(self, provider_symbol: str) -> str:
        # Quote pages are addressed as TICKER:EXCHANGE
        if ":" in provider_symbol:
            exchange, ticker = provider_symbol.split(":", 1)
            return f"{self.base_url}/quote/{ticker}:{exchange}"
        return f"{self.base_url}/quote/{provider_symbol}"

    async def _request_html(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                headers=self.HEADERS,
                timeout=self.request_timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise ProviderNetworkError(f"Google Finance request failed: {exc}", provider=self.name) from exc

        if response.status_code == 429:
            raise ProviderQuotaExceeded("Google Finance HTTP 429", provider=self.name)
        if response.status_code != 200:
            raise ProviderNetworkError(f"Google Finance HTTP {response.status_code}", provider=self.name)
        return response.text

    def parse_quote_page(self, symbol: str, html: str) -> Quote:
        soup = BeautifulSoup(html, "html.parser")

        price_node = soup.select_one("div.YMlKec.fxKbKc")
        price = parse_number(price_node.get_text(strip=True)) if price_node else None
        if price is None:
            raise ProviderDataError("Price not found on quote page", provider=self.name, symbol=symbol)

        stats = {}
        for row in soup.select("div.gyFHrc"):
            label = row.select_one("div.mfs7Fc")
            value = row.select_one("div.P6K39c")
            if label and value:
                stats[label.get_text(strip=True).lower()] = value.get_text(strip=True)

        return Quote(
            symbol=symbol,
            price=price,
            pe_ratio=parse_number(stats.get("p/e ratio")),
            market_cap=parse_number(stats.get("market cap")),
            volume=None,
        )

    async def _fetch_quote(self, symbol: str) -> Quote:
        html = await self._request_html(self._quote_url(self.to_provider_symbol(symbol)))
        return self.parse_quote_page(symbol, html)
