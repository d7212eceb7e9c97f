from decimal import Decimal
from typing import AsyncGenerator, List

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.api.routes import market_data, portfolio
from app.domain.models.portfolio import Holding
from app.infrastructure.market_data.quote_orchestrator import QuoteOrchestrator
from app.services.portfolio_service import PortfolioService


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records requested delays and moves the fake clock instead of waiting."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.advance(seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_sleep(clock) -> FakeSleep:
    return FakeSleep(clock)


@pytest.fixture()
def holdings() -> List[Holding]:
    return [
        Holding("INFY.NS", "Infosys Ltd", Decimal("1450.50"), 50, "NSE", "Technology"),
        Holding("TCS.NS", "Tata Consultancy Services", Decimal("3500.00"), 30, "NSE", "Technology"),
        Holding("HDFCBANK.NS", "HDFC Bank", Decimal("1650.00"), 40, "NSE", "Financials"),
        Holding("ONGC.NS", "Oil and Natural Gas Corp", Decimal("180.50"), 200, "NSE", "Energy"),
    ]


@pytest.fixture()
def app(holdings) -> FastAPI:
    app = FastAPI()
    app.include_router(portfolio.router, prefix="/api/portfolio", tags=["Portfolio"])
    app.include_router(market_data.router, prefix="/api/market-data", tags=["Market Data"])

    orchestrator = QuoteOrchestrator(providers=[], use_mock=True)
    app.state.quote_orchestrator = orchestrator
    app.state.portfolio_service = PortfolioService(holdings, orchestrator)
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
