from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HoldingIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    purchase_price: Decimal = Field(..., gt=0, alias="purchasePrice")
    quantity: int = Field(..., gt=0)
    exchange: str = Field(..., min_length=1)
    sector: str = Field(..., min_length=1)


class HoldingUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    purchase_price: Optional[Decimal] = Field(None, gt=0, alias="purchasePrice")
    quantity: Optional[int] = Field(None, gt=0)
    exchange: Optional[str] = Field(None, min_length=1)
    sector: Optional[str] = Field(None, min_length=1)
