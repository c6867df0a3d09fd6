"""
Wiring for a complete marketplace: directory, transport, services,
reconciler, time controller and dispatcher, built from settings.
"""

import random
from dataclasses import dataclass
from typing import Optional

import httpx

from .buyer.orders import OrderService
from .config import MarketSimSettings
from .infrastructure.countries import Countries
from .infrastructure.transport import HttpTransport
from .orchestration.dispatcher import Dispatcher
from .orchestration.reconciliation import BillReconciler
from .orchestration.time_controller import Sleep, TimeController
from .sellers.directory import Sellers
from .sellers.service import SellerService


@dataclass
class Marketplace:
    """All collaborators of one running marketplace."""

    settings: MarketSimSettings
    transport: HttpTransport
    seller_service: SellerService
    order_service: OrderService
    reconciler: BillReconciler
    dispatcher: Dispatcher

    async def __aenter__(self) -> "Marketplace":
        await self.transport.connect()
        return self

    async def __aexit__(self, *args) -> None:
        self.dispatcher.stop()
        await self.transport.disconnect()


def build_marketplace(
    settings: MarketSimSettings,
    client: Optional[httpx.AsyncClient] = None,
    sleep: Optional[Sleep] = None,
) -> Marketplace:
    """
    Assemble a marketplace.

    Args:
        settings: Settings to build from
        client: Optional pre-built HTTP client (tests inject mock transports)
        sleep: Optional sleep function for the time controller
    """
    rng = random.Random(settings.seed)
    countries = Countries(allowed=settings.countries, rng=rng)
    transport = HttpTransport(timeout=settings.request_timeout_seconds, client=client)

    seller_service = SellerService(
        Sellers(), transport, feedback_path=settings.feedback_path
    )
    order_service = OrderService(
        countries, transport, order_path=settings.order_path, rng=rng
    )
    reconciler = BillReconciler(seller_service, order_service)
    dispatcher = Dispatcher(
        seller_service,
        order_service,
        reconciler,
        TimeController(acceleration=settings.acceleration, sleep=sleep),
    )

    return Marketplace(
        settings=settings,
        transport=transport,
        seller_service=seller_service,
        order_service=order_service,
        reconciler=reconciler,
        dispatcher=dispatcher,
    )
