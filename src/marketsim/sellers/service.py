"""
Seller Service - registration, health, cash and feedback for sellers.

Thin layer over the seller directory and the transport; the decision of
what to credit or report lives in the reconciliation engine.
"""

from typing import Optional

import structlog

from ..infrastructure.message_schemas import Feedback, FeedbackType
from ..infrastructure.transport import HttpTransport
from .directory import Sellers
from .models import Seller

logger = structlog.get_logger()


class SellerService:
    """
    Operations on registered sellers.

    Args:
        sellers: Seller directory
        transport: Transport used to deliver feedback
        feedback_path: Suffix appended to the seller path for feedback
    """

    def __init__(
        self,
        sellers: Optional[Sellers] = None,
        transport: Optional[HttpTransport] = None,
        feedback_path: str = "/feedback",
    ):
        self.sellers = sellers if sellers is not None else Sellers()
        self.transport = transport
        self.feedback_path = feedback_path

    def register(self, seller_url: str, name: str) -> Seller:
        """
        Register a seller from its base URL.

        Raises:
            ValueError: If the URL is not a usable http(s) URL
        """
        seller = self.sellers.add(Seller.from_url(seller_url, name))
        logger.info("seller.registered", **seller.to_dict())
        return seller

    def all_sellers(self) -> list[Seller]:
        return self.sellers.all()

    def leaderboard(self) -> list[Seller]:
        """Sellers ordered by cash (highest first), then name."""
        return sorted(self.sellers.all(), key=lambda s: (-s.cash, s.name))

    def credit(self, seller: Seller, amount: float) -> float:
        """Add earned cash to a seller, returning the new balance."""
        return self.sellers.update_cash(seller.name, amount)

    def set_online(self, seller: Seller) -> None:
        self.sellers.set_online(seller.name)

    def set_offline(self, seller: Seller) -> None:
        self.sellers.set_offline(seller.name)

    def notify(self, seller: Seller, message: Feedback) -> None:
        """Send feedback to a seller without waiting for delivery."""
        if self.transport is not None:
            self.transport.post(
                seller.hostname,
                seller.port,
                seller.path + self.feedback_path,
                message.model_dump(mode="json"),
                scheme=seller.scheme,
            )

        if message.type == FeedbackType.ERROR:
            logger.error("seller.notified", seller=seller.name, content=message.content)
        else:
            logger.info("seller.notified", seller=seller.name, content=message.content)
