"""
Quote orchestrator - try providers in priority order, then mock data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.infrastructure.market_data.errors import ConfigurationError
from app.infrastructure.market_data.mock_provider import MockQuoteSource
from app.infrastructure.market_data.types import Quote, QuoteProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedProvider:
    name: str
    provider: QuoteProvider


class QuoteOrchestrator:
    """
    Resolves a symbol list to a complete symbol -> Quote mapping.

    A provider succeeds for a batch when ``get_multiple_quotes`` returns
    and at least one quote has a positive price. Anything else moves on to
    the next provider; when the chain is exhausted the mock source answers.
    Nothing raised by a provider reaches the caller.
    """

    def __init__(
        self,
        providers: List[NamedProvider],
        mock_source: Optional[MockQuoteSource] = None,
        use_mock: bool = False,
    ):
        self.providers = providers
        self.mock_source = mock_source or MockQuoteSource()
        self.use_mock = use_mock
        self.last_source: Optional[str] = None

    def _from_mock(self, symbols: List[str]) -> Dict[str, Quote]:
        self.last_source = self.mock_source.name
        return self.mock_source.quotes_for(symbols)

    async def get_quotes(self, symbols: List[str]) -> Dict[str, Quote]:
        ordered = list(dict.fromkeys(symbols))
        if not ordered:
            return {}

        if self.use_mock:
            logger.info("Using mock quotes (live fetching disabled)")
            return self._from_mock(ordered)

        logger.info("Fetching live quotes for %d symbols", len(ordered))
        for named in self.providers:
            try:
                if not named.provider.is_configured():
                    raise ConfigurationError("credentials missing", provider=named.name)
                quotes = await named.provider.get_multiple_quotes(ordered)
                valid = sum(1 for quote in quotes.values() if quote.is_available)
            except ConfigurationError as exc:
                logger.info("%s not configured (%s); skipping", named.name, exc)
                continue
            except Exception as exc:
                logger.warning("%s failed: %s; trying next provider", named.name, exc)
                continue

            if valid > 0:
                logger.info("%s served %d/%d quotes", named.name, valid, len(ordered))
                self.last_source = named.name
                return {symbol: quotes.get(symbol) or Quote.placeholder(symbol) for symbol in ordered}

            logger.warning("%s returned no valid prices; trying next provider", named.name)

        logger.warning("All quote providers failed; using mock quotes")
        return self._from_mock(ordered)

    def clear_cache(self, symbol: Optional[str] = None) -> None:
        for named in self.providers:
            named.provider.clear_cache(symbol)

    def describe(self) -> Dict[str, object]:
        return {
            "mode": "mock" if self.use_mock else "live",
            "providers": [
                {"name": named.name, "configured": named.provider.is_configured()}
                for named in self.providers
            ],
            "last_source": self.last_source,
        }
