"""
In-memory seller directory.

Keyed by seller name. Everything runs on one event loop, so there is no
locking: cash additions commute and online/offline is last write wins.
"""

from typing import Optional

import structlog

from ..errors import UnknownSellerError
from .models import Seller

logger = structlog.get_logger()


class Sellers:
    """Registry of sellers with their cash and health state."""

    def __init__(self):
        self._sellers: dict[str, Seller] = {}

    def __len__(self) -> int:
        return len(self._sellers)

    def __contains__(self, name: str) -> bool:
        return name in self._sellers

    def add(self, seller: Seller) -> Seller:
        """
        Register a seller.

        Registering an existing name updates its address and keeps the
        accumulated cash and online state.
        """
        existing = self._sellers.get(seller.name)
        if existing is not None:
            existing.hostname = seller.hostname
            existing.port = seller.port
            existing.path = seller.path
            existing.scheme = seller.scheme
            logger.info("sellers.address_updated", seller=seller.name, url=seller.url)
            return existing

        self._sellers[seller.name] = seller
        return seller

    def get(self, name: str) -> Optional[Seller]:
        return self._sellers.get(name)

    def all(self) -> list[Seller]:
        """Snapshot of the registered sellers."""
        return list(self._sellers.values())

    def update_cash(self, name: str, amount: float) -> float:
        """
        Add an amount to a seller's cash.

        Returns:
            The new cash balance
        """
        seller = self._require(name)
        seller.cash += amount
        return seller.cash

    def set_online(self, name: str) -> None:
        self._require(name).online = True

    def set_offline(self, name: str) -> None:
        self._require(name).online = False

    def _require(self, name: str) -> Seller:
        seller = self._sellers.get(name)
        if seller is None:
            raise UnknownSellerError(name)
        return seller
