"""
DOMAIN MODELS - PORTFOLIO & VALUATION

Immutable structures representing holdings and computed snapshots.
No market data fetching. Money is Decimal; ``to_dict`` renders the
camelCase float records the dashboard consumes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.utils.time import to_utc_iso


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class Holding:
    """
    A portfolio line item with static purchase attributes.
    """
    symbol: str
    name: str
    purchase_price: Decimal
    quantity: int
    exchange: str
    sector: str

    def __post_init__(self):
        if not self.symbol or not self.symbol.strip():
            raise ValueError("Holding symbol is required")
        if not isinstance(self.purchase_price, Decimal):
            object.__setattr__(self, "purchase_price", Decimal(str(self.purchase_price)))
        if self.purchase_price <= 0:
            raise ValueError(f"Purchase price must be positive for {self.symbol}")
        if isinstance(self.quantity, bool) or int(self.quantity) != self.quantity or self.quantity <= 0:
            raise ValueError(f"Quantity must be a positive integer for {self.symbol}")
        object.__setattr__(self, "quantity", int(self.quantity))

    @property
    def investment(self) -> Decimal:
        return self.purchase_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "purchasePrice": float(self.purchase_price),
            "quantity": self.quantity,
            "exchange": self.exchange,
            "sector": self.sector,
        }


@dataclass(frozen=True)
class ValuedHolding:
    """
    A holding with the figures derived from its resolved quote.
    """
    holding: Holding
    cmp: Decimal
    investment: Decimal
    present_value: Decimal
    gain_loss: Decimal
    portfolio_percentage: Decimal
    pe_ratio: Optional[Decimal] = None
    latest_earnings: Optional[str] = None

    @property
    def symbol(self) -> str:
        return self.holding.symbol

    @property
    def sector(self) -> str:
        return self.holding.sector

    def to_dict(self) -> Dict[str, Any]:
        data = self.holding.to_dict()
        data.update(
            {
                "investment": float(self.investment),
                "portfolioPercentage": float(self.portfolio_percentage),
                "cmp": float(self.cmp),
                "presentValue": float(self.present_value),
                "gainLoss": float(self.gain_loss),
                "peRatio": _num(self.pe_ratio),
                "latestEarnings": self.latest_earnings,
            }
        )
        return data


@dataclass(frozen=True)
class SectorAggregate:
    sector: str
    total_investment: Decimal
    total_present_value: Decimal
    stocks: List[ValuedHolding] = field(default_factory=list)

    @property
    def gain_loss(self) -> Decimal:
        return self.total_present_value - self.total_investment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sector": self.sector,
            "totalInvestment": float(self.total_investment),
            "totalPresentValue": float(self.total_present_value),
            "gainLoss": float(self.gain_loss),
            "stocks": [stock.to_dict() for stock in self.stocks],
        }


@dataclass(frozen=True)
class PortfolioSnapshot:
    """
    Latest computed state of the whole portfolio.
    """
    stocks: List[ValuedHolding]
    sectors: List[SectorAggregate]
    total_investment: Decimal
    total_present_value: Decimal
    last_updated: datetime

    @property
    def total_gain_loss(self) -> Decimal:
        return self.total_present_value - self.total_investment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stocks": [stock.to_dict() for stock in self.stocks],
            "sectors": [sector.to_dict() for sector in self.sectors],
            "totalInvestment": float(self.total_investment),
            "totalPresentValue": float(self.total_present_value),
            "totalGainLoss": float(self.total_gain_loss),
            "lastUpdated": to_utc_iso(self.last_updated),
        }
