"""
Error taxonomy for the marketplace load generator.

None of these are fatal to the dispatcher: the reconciliation engine turns
them into seller notifications (or an offline flag) and keeps going.
"""

from typing import Optional


class MarketSimError(Exception):
    """Base class for all marketsim errors."""


class MalformedReplyError(MarketSimError):
    """Seller replied with a bill that is missing or has a non-numeric total."""


class BillMismatchError(MarketSimError):
    """Seller's bill differs from the expected bill after rounding."""

    def __init__(self, seller_name: str, expected: float, actual: float):
        self.seller_name = seller_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{seller_name} replied {actual} but the right answer was {expected}"
        )


class UnreachableError(MarketSimError):
    """Transport could not complete a request to a seller."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        reason = f": {cause!r}" if cause is not None else ""
        super().__init__(f"Could not reach {url}{reason}")


class UnknownSellerError(MarketSimError, KeyError):
    """No seller is registered under the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown seller: {self.name}"
