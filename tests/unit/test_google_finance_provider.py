from decimal import Decimal

import pytest

from app.infrastructure.market_data.errors import ProviderDataError, ProviderNetworkError
from app.infrastructure.market_data.google_finance_provider import (
    GoogleFinanceProvider,
    parse_number,
)
from app.infrastructure.market_data.quote_cache import QuoteCache
from app.infrastructure.market_data.rate_limiter import RateLimiter

QUOTE_PAGE = """
<html><body>
  <div class="zzDege">Infosys Ltd</div>
  <div class="YMlKec fxKbKc">₹1,725.30</div>
  <div class="gyFHrc"><div class="mfs7Fc">Previous close</div><div class="P6K39c">₹1,712.10</div></div>
  <div class="gyFHrc"><div class="mfs7Fc">Market cap</div><div class="P6K39c">7.14T INR</div></div>
  <div class="gyFHrc"><div class="mfs7Fc">P/E ratio</div><div class="P6K39c">25.86</div></div>
</body></html>
"""


@pytest.fixture()
def provider(clock, fake_sleep):
    return GoogleFinanceProvider(
        cache=QuoteCache(clock=clock),
        rate_limiter=RateLimiter(1.0, clock=clock, sleep=fake_sleep),
    )


@pytest.mark.parametrize(
    "symbol, expected",
    [
        ("INFY.NS", "NSE:INFY"),
        ("RELIANCE.BO", "BOM:RELIANCE"),
        ("AAPL", "NASDAQ:AAPL"),
        ("VOD.L", "VOD.L"),
    ],
)
def test_symbol_translation(provider, symbol, expected):
    assert provider.to_provider_symbol(symbol) == expected


def test_quote_url_puts_exchange_last(provider):
    assert provider._quote_url("NSE:INFY") == "https://www.google.com/finance/quote/INFY:NSE"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("₹1,725.30", Decimal("1725.30")),
        ("25.86", Decimal("25.86")),
        ("7.14T INR", Decimal("7140000000000")),
        ("512.3B", Decimal("512300000000")),
        ("-", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_number(text, expected):
    assert parse_number(text) == expected


def test_parse_quote_page(provider):
    quote = provider.parse_quote_page("INFY.NS", QUOTE_PAGE)
    assert quote.symbol == "INFY.NS"
    assert quote.price == Decimal("1725.30")
    assert quote.pe_ratio == Decimal("25.86")
    assert quote.market_cap == Decimal("7140000000000")


def test_page_without_price_is_data_error(provider):
    with pytest.raises(ProviderDataError):
        provider.parse_quote_page("INFY.NS", "<html><body>Not found</body></html>")


@pytest.mark.asyncio
async def test_batch_isolates_failures(provider, fake_sleep, monkeypatch):
    requested = []

    async def fake_request(url):
        requested.append(url)
        if "TCS" in url:
            raise ProviderNetworkError("HTTP 503", provider="google")
        return QUOTE_PAGE

    monkeypatch.setattr(provider, "_request_html", fake_request)

    quotes = await provider.get_multiple_quotes(["INFY.NS", "TCS.NS"])

    assert quotes["INFY.NS"].price == Decimal("1725.30")
    assert quotes["TCS.NS"].price == 0
    assert requested == [
        "https://www.google.com/finance/quote/INFY:NSE",
        "https://www.google.com/finance/quote/TCS:NSE",
    ]
    assert fake_sleep.calls == [1.0]
