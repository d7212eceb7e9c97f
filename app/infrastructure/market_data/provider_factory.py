"""
Quote provider factory (config-driven).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from app.config import Settings, settings
from app.domain.services.config_engine import ConfigEngine
from app.domain.services.valuation_engine import EarningsLookup
from app.infrastructure.market_data.alpha_vantage_provider import AlphaVantageProvider
from app.infrastructure.market_data.base_provider import BaseQuoteProvider
from app.infrastructure.market_data.google_finance_provider import GoogleFinanceProvider
from app.infrastructure.market_data.mock_provider import MockQuoteSource
from app.infrastructure.market_data.quote_cache import QuoteCache
from app.infrastructure.market_data.quote_orchestrator import NamedProvider, QuoteOrchestrator
from app.infrastructure.market_data.rate_limiter import RateLimiter
from app.infrastructure.market_data.yahoo_provider import YahooFinanceProvider

logger = logging.getLogger(__name__)

DEFAULT_MARKET_DATA: Dict[str, Any] = {
    "provider": "alpha_vantage",
    "fallback_providers": ["google", "yahoo"],
    "cache_ttl": 60,
    "earnings_cache_ttl": 3600,
    "request_timeout": 10,
}

_ALIASES = {
    "alphavantage": "alpha_vantage",
    "alpha-vantage": "alpha_vantage",
    "google_finance": "google",
    "yahoo_finance": "yahoo",
    "yfinance": "yahoo",
}


def _normalize(name: str) -> str:
    name = (name or "").strip().lower()
    return _ALIASES.get(name, name)


def _load_app_config(config_engine: Optional[ConfigEngine] = None) -> Dict[str, Any]:
    if config_engine is None:
        config_engine = ConfigEngine()
        config_engine.load_all()
    merged = dict(DEFAULT_MARKET_DATA)
    merged.update(config_engine.get_app_setting("market_data") or {})
    return merged


def _build_provider(name: str, app_config: Dict[str, Any], app_settings: Settings) -> BaseQuoteProvider:
    name = _normalize(name)
    provider_cfg = app_config.get(name) or {}
    common = {
        "cache": QuoteCache(default_ttl_seconds=float(app_config.get("cache_ttl", 60))),
        "request_timeout": float(app_config.get("request_timeout", 10)),
    }

    if name == "alpha_vantage":
        return AlphaVantageProvider(
            api_key=app_settings.ALPHA_VANTAGE_API_KEY,
            base_url=provider_cfg.get("base_url", AlphaVantageProvider.BASE_URL),
            rate_limiter=RateLimiter(
                float(provider_cfg.get("min_interval_seconds", AlphaVantageProvider.DEFAULT_MIN_INTERVAL_SECONDS)),
                name=name,
            ),
            **common,
        )
    if name == "google":
        return GoogleFinanceProvider(
            base_url=provider_cfg.get("base_url", GoogleFinanceProvider.BASE_URL),
            rate_limiter=RateLimiter(
                float(provider_cfg.get("min_interval_seconds", GoogleFinanceProvider.DEFAULT_MIN_INTERVAL_SECONDS)),
                name=name,
            ),
            **common,
        )
    if name == "yahoo":
        return YahooFinanceProvider(
            earnings_ttl_seconds=float(app_config.get("earnings_cache_ttl", 3600)),
            stagger_seconds=float(provider_cfg.get("stagger_seconds", YahooFinanceProvider.DEFAULT_STAGGER_SECONDS)),
            **common,
        )
    raise ValueError(f"Unknown quote provider: {name}")


def _provider_chain(app_config: Dict[str, Any]) -> List[str]:
    names = [_normalize(app_config.get("provider", ""))]
    names += [_normalize(n) for n in app_config.get("fallback_providers", []) or []]
    ordered: List[str] = []
    for name in names:
        if name and name not in ordered:
            ordered.append(name)
    return ordered


def get_quote_orchestrator(
    config_engine: Optional[ConfigEngine] = None,
    app_settings: Optional[Settings] = None,
) -> QuoteOrchestrator:
    app_settings = app_settings or settings
    app_config = _load_app_config(config_engine)

    providers: List[NamedProvider] = []
    for name in _provider_chain(app_config):
        try:
            providers.append(NamedProvider(name, _build_provider(name, app_config, app_settings)))
        except ValueError as exc:
            logger.warning("Ignoring provider %r: %s", name, exc)

    return QuoteOrchestrator(
        providers=providers,
        mock_source=MockQuoteSource(),
        use_mock=app_settings.USE_MOCK_DATA,
    )


def get_earnings_lookup(
    orchestrator: QuoteOrchestrator,
    config_engine: Optional[ConfigEngine] = None,
) -> Optional[EarningsLookup]:
    """
    Earnings annotations come from Yahoo. Mock mode makes no network
    calls, so it gets no lookup.
    """
    if orchestrator.use_mock:
        return None
    for named in orchestrator.providers:
        if isinstance(named.provider, YahooFinanceProvider):
            return named.provider.get_earnings
    app_config = _load_app_config(config_engine)
    yahoo = YahooFinanceProvider(
        cache=QuoteCache(default_ttl_seconds=float(app_config.get("cache_ttl", 60))),
        earnings_ttl_seconds=float(app_config.get("earnings_cache_ttl", 3600)),
        request_timeout=float(app_config.get("request_timeout", 10)),
    )
    return yahoo.get_earnings


def get_market_data(
    config_engine: Optional[ConfigEngine] = None,
    app_settings: Optional[Settings] = None,
) -> Tuple[QuoteOrchestrator, Optional[EarningsLookup]]:
    orchestrator = get_quote_orchestrator(config_engine, app_settings)
    return orchestrator, get_earnings_lookup(orchestrator, config_engine)
