"""
VALUATION ENGINE
Combine static holdings with resolved quotes into a PortfolioSnapshot.

RESPONSIBILITIES:
- Per-holding investment, present value, gain/loss, portfolio weight
- Sector rollups sorted by invested amount
- Optional per-symbol earnings annotation (fetched concurrently)

RULES:
❌ No stored state
❌ No quote fetching
✅ Missing quote -> price 0, no P/E
✅ One failed earnings lookup never fails the valuation
"""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Dict, List, Mapping, Optional

from app.domain.models.portfolio import (
    Holding,
    PortfolioSnapshot,
    SectorAggregate,
    ValuedHolding,
)
from app.infrastructure.market_data.types import Quote
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

EarningsLookup = Callable[[str], Awaitable[Optional[str]]]


def total_investment(holdings: List[Holding]) -> Decimal:
    return sum((holding.investment for holding in holdings), ZERO)


def value_holding(
    holding: Holding,
    quote: Optional[Quote],
    portfolio_investment: Decimal,
    latest_earnings: Optional[str] = None,
) -> ValuedHolding:
    cmp = quote.price if quote is not None else ZERO
    investment = holding.investment
    present_value = cmp * holding.quantity
    if portfolio_investment > 0:
        percentage = investment / portfolio_investment * HUNDRED
    else:
        percentage = ZERO

    return ValuedHolding(
        holding=holding,
        cmp=cmp,
        investment=investment,
        present_value=present_value,
        gain_loss=present_value - investment,
        portfolio_percentage=percentage,
        pe_ratio=quote.pe_ratio if quote is not None else None,
        latest_earnings=latest_earnings,
    )


def group_by_sector(stocks: List[ValuedHolding]) -> List[SectorAggregate]:
    """
    Partition valued holdings by sector label, keeping holding order
    within each sector; sectors sorted by invested amount, largest first.
    """
    members: Dict[str, List[ValuedHolding]] = {}
    for stock in stocks:
        members.setdefault(stock.sector, []).append(stock)

    sectors = [
        SectorAggregate(
            sector=sector,
            total_investment=sum((s.investment for s in sector_stocks), ZERO),
            total_present_value=sum((s.present_value for s in sector_stocks), ZERO),
            stocks=sector_stocks,
        )
        for sector, sector_stocks in members.items()
    ]
    return sorted(sectors, key=lambda s: s.total_investment, reverse=True)


def value_portfolio(
    holdings: List[Holding],
    quotes: Mapping[str, Quote],
    earnings: Optional[Mapping[str, Optional[str]]] = None,
    as_of: Optional[datetime] = None,
) -> PortfolioSnapshot:
    """
    Deterministic valuation of ``holdings`` against ``quotes``.
    """
    earnings = earnings or {}
    invested = total_investment(holdings)

    stocks = [
        value_holding(holding, quotes.get(holding.symbol), invested, earnings.get(holding.symbol))
        for holding in holdings
    ]

    return PortfolioSnapshot(
        stocks=stocks,
        sectors=group_by_sector(stocks),
        total_investment=invested,
        total_present_value=sum((s.present_value for s in stocks), ZERO),
        last_updated=as_of or utc_now(),
    )


async def fetch_earnings(symbols: List[str], lookup: EarningsLookup) -> Dict[str, Optional[str]]:
    """
    Run ``lookup`` for every symbol concurrently. A failed lookup resolves
    to None for that symbol only.
    """
    unique = list(dict.fromkeys(symbols))
    results = await asyncio.gather(*(lookup(symbol) for symbol in unique), return_exceptions=True)

    earnings: Dict[str, Optional[str]] = {}
    for symbol, result in zip(unique, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.debug("Failed to fetch earnings for %s: %s", symbol, result)
            earnings[symbol] = None
        else:
            earnings[symbol] = result
    return earnings


async def build_snapshot(
    holdings: List[Holding],
    quotes: Mapping[str, Quote],
    earnings_lookup: Optional[EarningsLookup] = None,
) -> PortfolioSnapshot:
    earnings: Dict[str, Optional[str]] = {}
    if earnings_lookup is not None and holdings:
        earnings = await fetch_earnings([h.symbol for h in holdings], earnings_lookup)
    return value_portfolio(holdings, quotes, earnings)
