"""
Order generation, expected billing and bill validation.

The buyer side of a round: draw a random order, compute what a correct
seller should bill for it, and check that a seller's reply has the shape
of a bill before it is compared.
"""

import math
import random
from typing import Any, Optional

import structlog

from ..errors import MalformedReplyError
from ..infrastructure.countries import Countries
from ..infrastructure.message_schemas import Bill, MAX_ITEMS_PER_ORDER, Order
from ..infrastructure.transport import HttpTransport, OnFailure, OnSuccess
from ..money import fix_precision
from ..sellers.models import Seller
from .reductions import Reduction

logger = structlog.get_logger()


MIN_PRICE = 1.0
MAX_PRICE = 100.0
MAX_QUANTITY = 10


class OrderService:
    """
    Creates, bills and sends orders.

    Args:
        countries: Country/tax repository
        transport: Transport used by send_order (optional for pure billing)
        order_path: Suffix appended to the seller path for orders
        rng: Random source for order generation
    """

    def __init__(
        self,
        countries: Countries,
        transport: Optional[HttpTransport] = None,
        order_path: str = "/order",
        rng: Optional[random.Random] = None,
    ):
        self.countries = countries
        self.transport = transport
        self.order_path = order_path
        self._rng = rng or random.Random()

    def create_order(self, reduction: Reduction) -> Order:
        """Draw a random order of 1-10 items, tagged with the reduction name."""
        items = self._rng.randint(1, MAX_ITEMS_PER_ORDER)
        prices = [
            fix_precision(self._rng.uniform(MIN_PRICE, MAX_PRICE), 2)
            for _ in range(items)
        ]
        quantities = [self._rng.randint(1, MAX_QUANTITY) for _ in range(items)]

        return Order(
            prices=prices,
            quantities=quantities,
            country=self.countries.random_one(),
            reduction=reduction.name,
        )

    def bill(self, order: Order, reduction: Reduction) -> Bill:
        """
        Expected bill for an order.

        The total is left unrounded; rounding happens when bills are compared.
        """
        total = sum(price * quantity for price, quantity in order.items)
        tax = self.countries.tax(order.country)
        return Bill(total=reduction.apply(total * tax))

    @staticmethod
    def validate_bill(bill: Any) -> None:
        """
        Check that a decoded reply looks like a bill.

        Raises:
            MalformedReplyError: If ``total`` is missing or not a number
        """
        if not isinstance(bill, dict) or "total" not in bill:
            raise MalformedReplyError('The field "total" in the response is missing.')

        total = bill["total"]
        if isinstance(total, bool) or not isinstance(total, (int, float)):
            raise MalformedReplyError('"Total" is not a number.')
        try:
            finite = math.isfinite(total)
        except OverflowError:
            # int too large for a float
            finite = False
        if not finite:
            raise MalformedReplyError('"Total" is not a finite number.')

    def send_order(
        self,
        seller: Seller,
        order: Order,
        on_success: Optional[OnSuccess] = None,
        on_failure: Optional[OnFailure] = None,
    ):
        """Send an order to a seller without waiting for the reply."""
        if self.transport is None:
            raise RuntimeError("OrderService has no transport configured")

        logger.info(
            "order.sent",
            seller=seller.name,
            url=seller.url,
            order=order.model_dump(),
        )
        return self.transport.post(
            seller.hostname,
            seller.port,
            seller.path + self.order_path,
            order.model_dump(),
            on_success=on_success,
            on_failure=on_failure,
            scheme=seller.scheme,
        )
