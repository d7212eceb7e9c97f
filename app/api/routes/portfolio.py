"""
Portfolio API Routes
Live valuation plus CRUD over the in-memory holdings
"""

from fastapi import APIRouter, Depends, HTTPException, Request
import logging

from app.domain.models.portfolio import Holding
from app.domain.schemas.portfolio import HoldingIn, HoldingUpdate
from app.services.portfolio_service import HoldingExistsError, PortfolioService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_portfolio_service(request: Request) -> PortfolioService:
    service = getattr(request.app.state, "portfolio_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Portfolio service not initialized")
    return service


@router.get("")
async def get_portfolio(service: PortfolioService = Depends(get_portfolio_service)):
    """Complete portfolio with live (or mock) prices"""
    snapshot = await service.get_portfolio()
    return snapshot.to_dict()


@router.get("/holdings")
async def get_holdings(service: PortfolioService = Depends(get_portfolio_service)):
    """Holdings without market data"""
    return [holding.to_dict() for holding in service.get_holdings()]


@router.post("/stock", status_code=201)
async def add_stock(payload: HoldingIn, service: PortfolioService = Depends(get_portfolio_service)):
    try:
        holding = Holding(**payload.model_dump())
        service.add_holding(holding)
    except HoldingExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {"message": "Stock added successfully", "stock": holding.to_dict()}


@router.delete("/stock/{symbol}")
async def remove_stock(symbol: str, service: PortfolioService = Depends(get_portfolio_service)):
    if not service.remove_holding(symbol):
        raise HTTPException(status_code=404, detail=f"Stock not found: {symbol}")
    return {"message": "Stock removed successfully", "symbol": symbol}


@router.put("/stock/{symbol}")
async def update_stock(
    symbol: str,
    payload: HoldingUpdate,
    service: PortfolioService = Depends(get_portfolio_service),
):
    updates = payload.model_dump(exclude_none=True)
    try:
        updated = service.update_holding(symbol, updates)
    except HoldingExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if not updated:
        raise HTTPException(status_code=404, detail=f"Stock not found: {symbol}")
    return {
        "message": "Stock updated successfully",
        "symbol": symbol,
        "updates": payload.model_dump(mode="json", by_alias=True, exclude_none=True),
    }
