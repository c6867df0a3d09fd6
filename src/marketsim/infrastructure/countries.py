"""
Country and tax lookup for generated orders.

Tax multipliers are standard VAT rates expressed as ``1 + rate``.
"""

import random
from typing import Iterable, Optional

import structlog

logger = structlog.get_logger()


# Country code -> tax multiplier
DEFAULT_TAXES: dict[str, float] = {
    "AT": 1.20,
    "BE": 1.21,
    "BG": 1.20,
    "CY": 1.19,
    "CZ": 1.21,
    "DE": 1.19,
    "DK": 1.25,
    "EE": 1.22,
    "EL": 1.24,
    "ES": 1.21,
    "FI": 1.255,
    "FR": 1.20,
    "HR": 1.25,
    "HU": 1.27,
    "IE": 1.23,
    "IT": 1.22,
    "LT": 1.21,
    "LU": 1.17,
    "LV": 1.21,
    "MT": 1.18,
    "NL": 1.21,
    "PL": 1.23,
    "PT": 1.23,
    "RO": 1.19,
    "SE": 1.25,
    "SI": 1.22,
    "SK": 1.23,
    "UK": 1.20,
}


class Countries:
    """
    Known countries and their tax multipliers.

    Args:
        taxes: Country code -> multiplier (default: DEFAULT_TAXES)
        allowed: Optional subset of codes that random_one() draws from
        rng: Random source (seed it for reproducible orders)
    """

    def __init__(
        self,
        taxes: Optional[dict[str, float]] = None,
        allowed: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._taxes = dict(taxes if taxes is not None else DEFAULT_TAXES)
        for code, multiplier in self._taxes.items():
            if multiplier < 1:
                raise ValueError(f"Tax multiplier for {code} must be >= 1, got {multiplier}")

        codes = sorted(self._taxes) if allowed is None else list(allowed)
        unknown = [code for code in codes if code not in self._taxes]
        if unknown:
            raise ValueError(f"Unknown country codes: {', '.join(unknown)}")
        if not codes:
            raise ValueError("At least one country is required")

        self._codes = codes
        self._rng = rng or random.Random()

    @property
    def codes(self) -> list[str]:
        """Codes that orders are drawn from."""
        return list(self._codes)

    def random_one(self) -> str:
        """Pick a country code uniformly."""
        return self._rng.choice(self._codes)

    def tax(self, country: str) -> float:
        """Tax multiplier for a country code."""
        try:
            return self._taxes[country]
        except KeyError:
            raise ValueError(f"Unknown country: {country}") from None
