"""
Domain Models Package
Export all domain entities
"""

from .portfolio import (
    Holding,
    PortfolioSnapshot,
    SectorAggregate,
    ValuedHolding,
)

__all__ = [
    "Holding",
    "PortfolioSnapshot",
    "SectorAggregate",
    "ValuedHolding",
]
