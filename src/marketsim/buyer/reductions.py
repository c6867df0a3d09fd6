"""
Reduction policies applied to a taxed order total.

Three stateless singletons: PAY_THE_PRICE (no discount), HALF_PRICE and
STANDARD (tiered volume discount). Policies are selected by reference;
``name`` is the label that goes on the wire.
"""

from abc import ABC, abstractmethod


class Reduction(ABC):
    """A discount policy: maps an amount to the discounted amount."""

    name: str = ""

    @abstractmethod
    def apply(self, amount: float) -> float:
        """Return the amount after reduction."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class PayThePriceReduction(Reduction):
    name = "PAY THE PRICE"

    def apply(self, amount: float) -> float:
        return amount


class HalfPriceReduction(Reduction):
    name = "HALF PRICE"

    def apply(self, amount: float) -> float:
        return amount * 0.5


class StandardReduction(Reduction):
    """Volume discount: the larger the total, the larger the rate."""

    name = "STANDARD"

    # (threshold, rate), highest threshold first
    VOLUME_DISCOUNTS = [
        (50000, 0.15),
        (10000, 0.10),
        (7000, 0.07),
        (5000, 0.05),
        (1000, 0.03),
    ]

    def apply(self, amount: float) -> float:
        return amount * (1 - self.reduction_for(amount))

    def reduction_for(self, total: float) -> float:
        """Rate of the first tier whose threshold is reached, else 0."""
        for threshold, rate in self.VOLUME_DISCOUNTS:
            if threshold <= total:
                return rate
        return 0.0


STANDARD = StandardReduction()
PAY_THE_PRICE = PayThePriceReduction()
HALF_PRICE = HalfPriceReduction()

REDUCTIONS: dict[str, Reduction] = {
    reduction.name: reduction for reduction in (STANDARD, PAY_THE_PRICE, HALF_PRICE)
}


def reduction_named(name: str) -> Reduction:
    """Look up a reduction by its wire label."""
    try:
        return REDUCTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown reduction: {name}") from None
