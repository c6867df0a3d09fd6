"""Tests for the country/tax repository."""

import random
from collections import Counter

import pytest

from marketsim.infrastructure.countries import DEFAULT_TAXES, Countries


class TestCountries:
    """Tests for Countries."""

    def test_default_taxes_at_least_one(self):
        assert all(multiplier >= 1 for multiplier in DEFAULT_TAXES.values())

    def test_tax_lookup(self):
        countries = Countries()
        assert countries.tax("FR") == DEFAULT_TAXES["FR"]

    def test_unknown_country_raises(self):
        with pytest.raises(ValueError):
            Countries().tax("ZZ")

    def test_random_one_covers_all_codes(self):
        countries = Countries(taxes={"FR": 1.2, "DE": 1.19}, rng=random.Random(3))
        drawn = Counter(countries.random_one() for _ in range(200))
        assert set(drawn) == {"FR", "DE"}

    def test_allowed_subset(self):
        countries = Countries(allowed=["FR"], rng=random.Random(3))
        assert {countries.random_one() for _ in range(20)} == {"FR"}
        assert countries.codes == ["FR"]

    def test_unknown_allowed_code_rejected(self):
        with pytest.raises(ValueError, match="ZZ"):
            Countries(allowed=["FR", "ZZ"])

    def test_empty_allowed_rejected(self):
        with pytest.raises(ValueError):
            Countries(allowed=[])

    def test_multiplier_below_one_rejected(self):
        with pytest.raises(ValueError):
            Countries(taxes={"XX": 0.9})
