"""
Buyer - order generation and pricing rules.

This package provides:
- Reduction policies: PAY_THE_PRICE, HALF_PRICE, STANDARD
- OrderService: Random orders, expected bills, bill validation, sending
"""

from .orders import OrderService
from .reductions import (
    HALF_PRICE,
    PAY_THE_PRICE,
    REDUCTIONS,
    STANDARD,
    HalfPriceReduction,
    PayThePriceReduction,
    Reduction,
    StandardReduction,
    reduction_named,
)

__all__ = [
    "OrderService",
    "Reduction",
    "PayThePriceReduction",
    "HalfPriceReduction",
    "StandardReduction",
    "STANDARD",
    "PAY_THE_PRICE",
    "HALF_PRICE",
    "REDUCTIONS",
    "reduction_named",
]
