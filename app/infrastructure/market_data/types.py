"""
Quote record and quote provider protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Protocol


ZERO = Decimal("0")


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: Decimal
    pe_ratio: Optional[Decimal] = None
    market_cap: Optional[Decimal] = None
    volume: Optional[int] = None

    @property
    def is_available(self) -> bool:
        return self.price > 0

    @classmethod
    def placeholder(cls, symbol: str) -> "Quote":
        """Zero-price quote standing in for a symbol that could not be fetched."""
        return cls(symbol=symbol, price=ZERO)


class QuoteProvider(Protocol):
    name: str

    def is_configured(self) -> bool:
        ...

    async def get_quote(self, symbol: str) -> Quote:
        ...

    async def get_multiple_quotes(self, symbols: List[str]) -> Dict[str, Quote]:
        ...

    def clear_cache(self, symbol: Optional[str] = None) -> None:
        ...


def to_decimal(value: object) -> Optional[Decimal]:
    """
    Parse an upstream numeric field. Returns None for missing, blank or
    non-numeric values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        parsed = Decimal(text)
    except (ArithmeticError, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed


def to_int(value: object) -> Optional[int]:
    parsed = to_decimal(value)
    if parsed is None:
        return None
    return int(parsed)
