"""Shared pytest fixtures and configuration."""

import random
from typing import Any, Optional

import pytest

from marketsim.buyer.orders import OrderService
from marketsim.infrastructure.countries import Countries
from marketsim.orchestration.reconciliation import BillReconciler
from marketsim.sellers.directory import Sellers
from marketsim.sellers.service import SellerService


class RecordingTransport:
    """Transport double that records posts instead of sending them."""

    def __init__(self):
        self.posts: list[dict[str, Any]] = []

    @property
    def in_flight(self) -> int:
        return 0

    def post(
        self,
        hostname: str,
        port: Optional[int],
        path: str,
        payload: dict,
        on_success=None,
        on_failure=None,
        scheme: str = "http",
    ):
        self.posts.append(
            {
                "hostname": hostname,
                "port": port,
                "path": path,
                "payload": payload,
                "on_success": on_success,
                "on_failure": on_failure,
                "scheme": scheme,
            }
        )
        return None

    def sent_to(self, path_suffix: str) -> list[dict[str, Any]]:
        """Posts whose path ends with a suffix (e.g. "/feedback")."""
        return [post for post in self.posts if post["path"].endswith(path_suffix)]


@pytest.fixture
def transport():
    """Recording transport."""
    return RecordingTransport()


@pytest.fixture
def countries():
    """Single-country repository with a 10% tax."""
    return Countries(taxes={"FR": 1.1}, rng=random.Random(42))


@pytest.fixture
def sellers():
    """Empty seller directory."""
    return Sellers()


@pytest.fixture
def seller_service(sellers, transport):
    """Seller service posting feedback to the recording transport."""
    return SellerService(sellers, transport)


@pytest.fixture
def order_service(countries, transport):
    """Order service with a seeded random source."""
    return OrderService(countries, transport, rng=random.Random(7))


@pytest.fixture
def reconciler(seller_service, order_service):
    """Bill reconciler over the fixtures above."""
    return BillReconciler(seller_service, order_service)


@pytest.fixture
def alice(seller_service):
    """A registered seller."""
    return seller_service.register("http://localhost:3001/shop/", "alice")


@pytest.fixture
def bob(seller_service):
    """A second registered seller."""
    return seller_service.register("http://localhost:3002", "bob")
