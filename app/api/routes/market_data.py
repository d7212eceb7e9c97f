"""
Market Data routes - provider chain status & cache administration.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from app.infrastructure.market_data.quote_orchestrator import QuoteOrchestrator

router = APIRouter()


def _orchestrator(request: Request) -> QuoteOrchestrator:
    orchestrator = getattr(request.app.state, "quote_orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Market data not initialized")
    return orchestrator


@router.get("/status")
async def market_data_status(request: Request):
    """Return quote mode, provider chain and the last source used."""
    return _orchestrator(request).describe()


@router.post("/cache/clear")
async def clear_cache(request: Request, symbol: Optional[str] = None):
    """Clear cached quotes for one symbol, or for every symbol."""
    _orchestrator(request).clear_cache(symbol)
    return {"cleared": True, "symbol": symbol}
