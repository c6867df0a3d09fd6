"""Monetary rounding helpers."""

from decimal import Decimal, ROUND_HALF_UP, localcontext


def fix_precision(value: float, digits: int = 2) -> float:
    """
    Round a monetary amount half-up to a fixed number of decimals.

    Rounds the shortest decimal repr of the float rather than its binary
    expansion, so 0.125 gives 0.13 and 54.999999 gives 55.0.
    """
    quantum = Decimal(1).scaleb(-digits)
    amount = Decimal(repr(value))
    with localcontext() as ctx:
        # Large floats (1e300) need more than the default 28 digits
        ctx.prec = max(ctx.prec, amount.adjusted() + digits + 2)
        return float(amount.quantize(quantum, rounding=ROUND_HALF_UP))
