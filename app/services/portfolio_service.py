# app/services/portfolio_service.py

import dataclasses
import logging
from typing import Any, Dict, Iterable, List, Optional

from app.domain.models.portfolio import Holding, PortfolioSnapshot
from app.domain.services.valuation_engine import EarningsLookup, build_snapshot
from app.infrastructure.market_data.quote_orchestrator import QuoteOrchestrator

logger = logging.getLogger(__name__)


class HoldingExistsError(ValueError):
    """A holding with this symbol is already in the portfolio."""


class PortfolioService:
    """
    In-memory holdings collection plus the live valuation pass.
    """

    def __init__(
        self,
        holdings: Iterable[Holding],
        orchestrator: QuoteOrchestrator,
        earnings_lookup: Optional[EarningsLookup] = None,
    ):
        self._holdings: List[Holding] = list(holdings)
        self.orchestrator = orchestrator
        self.earnings_lookup = earnings_lookup

    # ------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------
    async def get_portfolio(self) -> PortfolioSnapshot:
        holdings = list(self._holdings)
        symbols = [h.symbol for h in holdings]

        quotes = await self.orchestrator.get_quotes(symbols)
        snapshot = await build_snapshot(holdings, quotes, self.earnings_lookup)

        logger.info(
            "Portfolio snapshot ready | source=%s invested=%.2f value=%.2f pnl=%.2f",
            self.orchestrator.last_source,
            snapshot.total_investment,
            snapshot.total_present_value,
            snapshot.total_gain_loss,
        )
        return snapshot

    # ------------------------------------------------------------
    # Holdings CRUD
    # ------------------------------------------------------------
    def get_holdings(self) -> List[Holding]:
        return list(self._holdings)

    def _index_of(self, symbol: str) -> int:
        for index, holding in enumerate(self._holdings):
            if holding.symbol == symbol:
                return index
        return -1

    def add_holding(self, holding: Holding) -> None:
        if self._index_of(holding.symbol) != -1:
            raise HoldingExistsError(f"Holding already exists: {holding.symbol}")
        self._holdings.append(holding)
        logger.info("Added holding %s", holding.symbol)

    def remove_holding(self, symbol: str) -> bool:
        index = self._index_of(symbol)
        if index == -1:
            return False
        del self._holdings[index]
        self.orchestrator.clear_cache(symbol)
        logger.info("Removed holding %s", symbol)
        return True

    def update_holding(self, symbol: str, changes: Dict[str, Any]) -> bool:
        """
        Apply field changes to one holding. Raises ValueError when the
        result is invalid or renames onto an existing symbol.
        """
        index = self._index_of(symbol)
        if index == -1:
            return False

        changes = {k: v for k, v in changes.items() if v is not None}
        new_symbol = changes.get("symbol")
        if new_symbol and new_symbol != symbol and self._index_of(new_symbol) != -1:
            raise HoldingExistsError(f"Holding already exists: {new_symbol}")

        self._holdings[index] = dataclasses.replace(self._holdings[index], **changes)
        logger.info("Updated holding %s (%s)", symbol, ", ".join(sorted(changes)) or "no changes")
        return True
