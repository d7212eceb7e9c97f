"""
Static canned quotes for the sample portfolio.
Used when live fetching is disabled and as the last resort of the chain.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from app.infrastructure.market_data.errors import ProviderDataError
from app.infrastructure.market_data.types import Quote


def _q(symbol: str, price: str, pe: str, cap: str, volume: int) -> Quote:
    return Quote(
        symbol=symbol,
        price=Decimal(price),
        pe_ratio=Decimal(pe),
        market_cap=Decimal(cap),
        volume=volume,
    )


MOCK_QUOTES: Dict[str, Quote] = {
    quote.symbol: quote
    for quote in (
        _q("INFY.NS", "1725.30", "25.86", "713971.52", 5234567),
        _q("TCS.NS", "3850.00", "28.45", "1402345.67", 2134567),
        _q("WIPRO.NS", "445.75", "22.15", "245678.90", 8765432),
        _q("HDFCBANK.NS", "1700.15", "18.69", "1300795.86", 4567890),
        _q("ICICIBANK.NS", "1215.50", "17.68", "859583.56", 6789012),
        _q("AXISBANK.NS", "1095.25", "14.25", "337890.45", 5678901),
        _q("TATAMOTORS.NS", "620.00", "12.45", "245678.90", 9876543),
        _q("MARUTI.NS", "11500.00", "31.25", "347890.12", 1234567),
        _q("ITC.NS", "435.50", "24.56", "538901.23", 7890123),
        _q("HINDUNILVR.NS", "2350.00", "58.45", "553456.78", 2345678),
        _q("RELIANCE.NS", "2895.75", "26.34", "1954321.09", 5678901),
        _q("ONGC.NS", "245.60", "8.92", "308901.23", 8901234),
    )
}


class MockQuoteSource:
    """No cache, no network: every call answers from ``MOCK_QUOTES``."""

    name = "mock"
    display_name = "Mock data"

    def __init__(self, quotes: Optional[Dict[str, Quote]] = None):
        self._quotes = dict(MOCK_QUOTES if quotes is None else quotes)

    def is_configured(self) -> bool:
        return True

    def all_quotes(self) -> Dict[str, Quote]:
        return dict(self._quotes)

    async def get_quote(self, symbol: str) -> Quote:
        quote = self._quotes.get(symbol)
        if quote is None:
            raise ProviderDataError("No mock quote", provider=self.name, symbol=symbol)
        return quote

    def quotes_for(self, symbols: List[str]) -> Dict[str, Quote]:
        """
        Canned quote per requested symbol; symbols outside the canned set
        get the zero-price placeholder so the mapping stays complete.
        """
        return {
            symbol: self._quotes.get(symbol) or Quote.placeholder(symbol)
            for symbol in dict.fromkeys(symbols)
        }

    async def get_multiple_quotes(self, symbols: List[str]) -> Dict[str, Quote]:
        return self.quotes_for(symbols)

    def clear_cache(self, symbol: Optional[str] = None) -> None:
        return None
