import pytest
from httpx import AsyncClient, ASGITransport


@pytest.mark.asyncio
@pytest.mark.integration
async def test_portfolio_snapshot(client):
    resp = await client.get("/api/portfolio")
    assert resp.status_code == 200
    data = resp.json()

    assert {s["symbol"] for s in data["stocks"]} == {"INFY.NS", "TCS.NS", "HDFCBANK.NS", "ONGC.NS"}
    assert data["lastUpdated"].endswith("Z")
    assert data["totalGainLoss"] == pytest.approx(data["totalPresentValue"] - data["totalInvestment"])
    assert [s["sector"] for s in data["sectors"]] == ["Technology", "Financials", "Energy"]

    infy = next(s for s in data["stocks"] if s["symbol"] == "INFY.NS")
    assert infy["cmp"] == 1725.30
    assert infy["investment"] == 72525.0
    assert infy["peRatio"] == 25.86


@pytest.mark.asyncio
@pytest.mark.integration
async def test_holdings_crud(client):
    new_stock = {
        "symbol": "ITC.NS",
        "name": "ITC Ltd",
        "purchasePrice": 420.5,
        "quantity": 120,
        "exchange": "NSE",
        "sector": "FMCG",
    }
    resp = await client.post("/api/portfolio/stock", json=new_stock)
    assert resp.status_code == 201
    assert resp.json()["stock"]["purchasePrice"] == 420.5

    resp = await client.post("/api/portfolio/stock", json=new_stock)
    assert resp.status_code == 409

    resp = await client.put("/api/portfolio/stock/ITC.NS", json={"quantity": 150})
    assert resp.status_code == 200
    assert resp.json()["updates"] == {"quantity": 150}

    resp = await client.get("/api/portfolio/holdings")
    itc = next(h for h in resp.json() if h["symbol"] == "ITC.NS")
    assert itc["quantity"] == 150

    resp = await client.delete("/api/portfolio/stock/ITC.NS")
    assert resp.status_code == 200
    resp = await client.delete("/api/portfolio/stock/ITC.NS")
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_payloads_rejected(client):
    resp = await client.post("/api/portfolio/stock", json={"symbol": "X.NS", "quantity": 1})
    assert resp.status_code == 422

    resp = await client.put("/api/portfolio/stock/INFY.NS", json={"purchasePrice": -5})
    assert resp.status_code == 422

    resp = await client.put("/api/portfolio/stock/NOPE.NS", json={"quantity": 5})
    assert resp.status_code == 404

    resp = await client.put("/api/portfolio/stock/ONGC.NS", json={"symbol": "TCS.NS"})
    assert resp.status_code == 409


@pytest.mark.asyncio
@pytest.mark.integration
async def test_market_data_status_and_cache_clear(client):
    resp = await client.get("/api/market-data/status")
    assert resp.status_code == 200
    assert resp.json() == {"mode": "mock", "providers": [], "last_source": None}

    await client.get("/api/portfolio")
    resp = await client.get("/api/market-data/status")
    assert resp.json()["last_source"] == "mock"

    resp = await client.post("/api/market-data/cache/clear", params={"symbol": "INFY.NS"})
    assert resp.status_code == 200
    assert resp.json() == {"cleared": True, "symbol": "INFY.NS"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_service_not_initialized_returns_503():
    from fastapi import FastAPI
    from app.api.routes import portfolio

    bare = FastAPI()
    bare.include_router(portfolio.router, prefix="/api/portfolio")
    async with AsyncClient(transport=ASGITransport(app=bare), base_url="http://test") as ac:
        resp = await ac.get("/api/portfolio")
    assert resp.status_code == 503


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health_and_root():
    from app.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        health = await ac.get("/health")
        root = await ac.get("/")

    assert health.status_code == 200
    body = health.json()
    assert body["status"] == "OK"
    assert body["timestamp"].endswith("Z")
    assert body["uptime"] >= 0
    assert root.json()["endpoints"]["portfolio"] == "/api/portfolio"
