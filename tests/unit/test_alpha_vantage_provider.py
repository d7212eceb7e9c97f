import asyncio
from decimal import Decimal

import pytest

from app.infrastructure.market_data.alpha_vantage_provider import AlphaVantageProvider
from app.infrastructure.market_data.errors import (
    ConfigurationError,
    ProviderDataError,
    ProviderNetworkError,
    ProviderQuotaExceeded,
)
from app.infrastructure.market_data.quote_cache import QuoteCache
from app.infrastructure.market_data.rate_limiter import RateLimiter


def _global_quote(price="1725.3000", volume="5234567"):
    return {
        "Global Quote": {
            "01. symbol": "INFY",
            "05. price": price,
            "06. volume": volume,
        }
    }


@pytest.fixture()
def provider(clock, fake_sleep):
    return AlphaVantageProvider(
        api_key="test-key",
        cache=QuoteCache(clock=clock),
        rate_limiter=RateLimiter(12, clock=clock, sleep=fake_sleep),
    )


def test_symbol_suffix_stripped(provider):
    assert provider.to_provider_symbol("INFY.NS") == "INFY"
    assert provider.to_provider_symbol("RELIANCE.BO") == "RELIANCE"
    assert provider.to_provider_symbol("AAPL") == "AAPL"


@pytest.mark.asyncio
async def test_global_quote_parsing(provider, monkeypatch):
    seen = []

    async def fake_request(params):
        seen.append(params)
        return _global_quote()

    monkeypatch.setattr(provider, "_request_json", fake_request)

    quote = await provider.get_quote("INFY.NS")

    assert quote.symbol == "INFY.NS"
    assert quote.price == Decimal("1725.30")
    assert quote.volume == 5234567
    assert quote.pe_ratio is None
    assert quote.market_cap is None
    assert seen[0]["function"] == "GLOBAL_QUOTE"
    assert seen[0]["symbol"] == "INFY"
    assert seen[0]["apikey"] == "test-key"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, error",
    [
        ({"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute"}, ProviderQuotaExceeded),
        ({"Information": "daily limit reached"}, ProviderQuotaExceeded),
        ({"Error Message": "Invalid API call"}, ProviderDataError),
        ({"Global Quote": {}}, ProviderDataError),
        (_global_quote(price="0.0000"), ProviderDataError),
    ],
)
async def test_unusable_payloads_raise(provider, monkeypatch, payload, error):
    async def fake_request(params):
        return payload

    monkeypatch.setattr(provider, "_request_json", fake_request)

    with pytest.raises(error):
        await provider.get_quote("INFY.NS")
    assert provider.cache.get("av:INFY.NS") is None


@pytest.mark.asyncio
async def test_missing_key_is_not_configured(clock, fake_sleep, monkeypatch):
    provider = AlphaVantageProvider(api_key="  ", rate_limiter=RateLimiter(12, clock=clock, sleep=fake_sleep))
    calls = []

    async def fake_request(params):
        calls.append(params)
        return _global_quote()

    monkeypatch.setattr(provider, "_request_json", fake_request)

    assert provider.is_configured() is False
    with pytest.raises(ConfigurationError):
        await provider.get_quote("INFY.NS")
    assert calls == []


@pytest.mark.asyncio
async def test_cache_hit_skips_network_and_limiter(provider, fake_sleep, monkeypatch):
    calls = []

    async def fake_request(params):
        calls.append(params["symbol"])
        return _global_quote()

    monkeypatch.setattr(provider, "_request_json", fake_request)

    first = await provider.get_quote("INFY.NS")
    second = await provider.get_quote("INFY.NS")

    assert first == second
    assert calls == ["INFY"]
    assert fake_sleep.calls == []


@pytest.mark.asyncio
async def test_clear_cache_forces_refetch(provider, monkeypatch):
    calls = []

    async def fake_request(params):
        calls.append(params["symbol"])
        return _global_quote()

    monkeypatch.setattr(provider, "_request_json", fake_request)

    await provider.get_quote("INFY.NS")
    provider.clear_cache("INFY.NS")
    await provider.get_quote("INFY.NS")

    assert calls == ["INFY", "INFY"]


@pytest.mark.asyncio
async def test_batch_is_sequential_and_paced(provider, fake_sleep, monkeypatch):
    events = []

    async def fake_request(params):
        events.append(("start", params["symbol"]))
        await asyncio.sleep(0)
        events.append(("end", params["symbol"]))
        return _global_quote()

    monkeypatch.setattr(provider, "_request_json", fake_request)

    quotes = await provider.get_multiple_quotes(["INFY.NS", "TCS.NS", "WIPRO.NS"])

    assert list(quotes) == ["INFY.NS", "TCS.NS", "WIPRO.NS"]
    assert events == [
        ("start", "INFY"), ("end", "INFY"),
        ("start", "TCS"), ("end", "TCS"),
        ("start", "WIPRO"), ("end", "WIPRO"),
    ]
    assert fake_sleep.calls == [12, 12]


@pytest.mark.asyncio
async def test_batch_never_raises_and_is_complete(provider, monkeypatch):
    async def fake_request(params):
        if params["symbol"] == "TCS":
            raise ProviderNetworkError("connection reset", provider="alpha_vantage")
        if params["symbol"] == "WIPRO":
            return {"Note": "frequency exceeded"}
        return _global_quote()

    monkeypatch.setattr(provider, "_request_json", fake_request)

    quotes = await provider.get_multiple_quotes(["INFY.NS", "TCS.NS", "WIPRO.NS", "INFY.NS"])

    assert set(quotes) == {"INFY.NS", "TCS.NS", "WIPRO.NS"}
    assert quotes["INFY.NS"].price == Decimal("1725.30")
    assert quotes["TCS.NS"].price == 0
    assert quotes["WIPRO.NS"].price == 0


@pytest.mark.asyncio
async def test_unexpected_error_becomes_placeholder(provider, monkeypatch):
    async def fake_request(params):
        raise RuntimeError("boom")

    monkeypatch.setattr(provider, "_request_json", fake_request)

    quotes = await provider.get_multiple_quotes(["INFY.NS"])
    assert quotes["INFY.NS"].price == 0
