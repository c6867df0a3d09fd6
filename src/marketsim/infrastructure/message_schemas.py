"""
Message schemas for the order/bill/feedback protocol.

These are the JSON payloads exchanged with sellers over HTTP:
- Order: buyer -> seller (POST <seller path>/order)
- Bill: seller -> buyer (reply body of the order request)
- Feedback: buyer -> seller (POST <seller path>/feedback)
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

MAX_ITEMS_PER_ORDER = 10


class FeedbackType(str, Enum):
    """Kinds of feedback sent to a seller."""
    INFO = "INFO"
    ERROR = "ERROR"


class Order(BaseModel):
    """
    Purchase order sent to every seller in a round.

    ``prices`` and ``quantities`` are aligned index for index.
    """
    prices: list[float] = Field(min_length=1, max_length=MAX_ITEMS_PER_ORDER)
    quantities: list[int] = Field(min_length=1, max_length=MAX_ITEMS_PER_ORDER)
    country: str
    reduction: str  # Reduction name, e.g. "STANDARD"

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_items(self) -> "Order":
        if len(self.prices) != len(self.quantities):
            raise ValueError(
                f"{len(self.prices)} prices for {len(self.quantities)} quantities"
            )
        if any(price <= 0 for price in self.prices):
            raise ValueError("prices must be positive")
        if any(quantity < 1 for quantity in self.quantities):
            raise ValueError("quantities must be at least 1")
        return self

    @property
    def items(self) -> list[tuple[float, int]]:
        """(price, quantity) pairs."""
        return list(zip(self.prices, self.quantities))


class Bill(BaseModel):
    """Bill total, unrounded until it is compared."""
    total: float


class Feedback(BaseModel):
    """Feedback message for a seller."""
    type: FeedbackType
    content: str

    @classmethod
    def info(cls, content: str) -> "Feedback":
        return cls(type=FeedbackType.INFO, content=content)

    @classmethod
    def error(cls, content: str) -> "Feedback":
        return cls(type=FeedbackType.ERROR, content=content)


class SellerRegistration(BaseModel):
    """Body of a seller registration request."""
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
