"""
Sellers - the endpoints the marketplace buys from.

This package provides:
- Seller: Registered seller with address, cash and health flag
- Sellers: In-memory seller directory
- SellerService: Registration, health updates, crediting and feedback

The reference seller app (``marketsim.sellers.reference_seller``) is imported
on demand since it depends on the buyer-side biller.
"""

from .directory import Sellers
from .models import Seller
from .service import SellerService

__all__ = [
    "Seller",
    "Sellers",
    "SellerService",
]
