"""
FastAPI Main Application
Portfolio dashboard API: holdings, live quotes, valuation
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import time
from typing import AsyncGenerator

from app.config import settings
from app.core.logging import setup_logging
from app.domain.services.config_engine import ConfigEngine
from app.infrastructure.market_data.provider_factory import get_market_data
from app.services.portfolio_service import PortfolioService
from app.utils.logging_redaction import install_redaction_filter
from app.utils.time import to_utc_iso, utc_now

setup_logging(settings.LOG_LEVEL)
install_redaction_filter()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"
_started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Loads configuration and wires the quote chain into the portfolio service
    """
    logger.info("=" * 60)
    logger.info("Starting Portfolio Dashboard API")
    logger.info("=" * 60)

    config_engine = ConfigEngine(Path(settings.CONFIG_DIR) if settings.CONFIG_DIR else None)
    config_engine.load_all()
    logger.info("Configuration loaded: %d holdings", len(config_engine.holdings))

    orchestrator, earnings_lookup = get_market_data(config_engine, settings)
    app.state.quote_orchestrator = orchestrator
    app.state.portfolio_service = PortfolioService(
        config_engine.holdings,
        orchestrator,
        earnings_lookup,
    )

    chain = " -> ".join(named.name for named in orchestrator.providers) or "(none)"
    logger.info("Quote mode: %s | chain: %s -> mock", "mock" if orchestrator.use_mock else "live", chain)
    logger.info("API Server: http://%s:%s", settings.API_HOST, settings.API_PORT)

    yield

    logger.info("Portfolio Dashboard API shutdown complete")


app = FastAPI(
    title="Portfolio Dashboard API",
    description="Live portfolio valuation with multi-source quote fallback",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)},
    )


@app.get("/health")
async def health_check():
    return {
        "status": "OK",
        "timestamp": to_utc_iso(utc_now()),
        "uptime": round(time.monotonic() - _started_at, 3),
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Portfolio Dashboard API",
        "version": VERSION,
        "endpoints": {
            "health": "/health",
            "portfolio": "/api/portfolio",
            "holdings": "/api/portfolio/holdings",
            "addStock": "POST /api/portfolio/stock",
            "removeStock": "DELETE /api/portfolio/stock/{symbol}",
            "updateStock": "PUT /api/portfolio/stock/{symbol}",
            "marketDataStatus": "/api/market-data/status",
            "clearCache": "POST /api/market-data/cache/clear",
        },
        "docs": "/docs",
    }


# Import and include routers
from app.api.routes import market_data, portfolio

app.include_router(portfolio.router, prefix="/api/portfolio", tags=["Portfolio"])
app.include_router(market_data.router, prefix="/api/market-data", tags=["Market Data"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
