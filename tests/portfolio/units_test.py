"""Tests for weight units and troy-ounce conversion."""

from __future__ import annotations

import pytest

from silvertracker.portfolio.units import (
    TROY_OZ_TO_GRAMS,
    WeightUnit,
    parse_unit,
    to_troy_ounces,
    troy_ounces_to_grams,
)


class TestParseUnit:
    """Tests for unit parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("oz", WeightUnit.TROY_OUNCE),
            ("g", WeightUnit.GRAM),
            ("kg", WeightUnit.KILOGRAM),
        ],
    )
    def test_known_units(self, raw, expected):
        assert parse_unit(raw) is expected

    def test_enum_passes_through(self):
        assert parse_unit(WeightUnit.GRAM) is WeightUnit.GRAM

    @pytest.mark.parametrize("raw", ["lb", "OZ", "", "grams"])
    def test_unknown_unit_raises(self, raw):
        with pytest.raises(ValueError, match="weight unit must be one of"):
            parse_unit(raw)


class TestToTroyOunces:
    """Tests for weight conversion."""

    def test_ounces_unchanged(self):
        assert to_troy_ounces(10.0, "oz") == 10.0

    def test_grams(self):
        assert to_troy_ounces(31.1035, "g") == pytest.approx(1.0)

    def test_hundred_grams(self):
        assert to_troy_ounces(100.0, "g") == pytest.approx(3.21507, abs=1e-5)

    def test_kilogram(self):
        assert to_troy_ounces(1.0, "kg") == pytest.approx(32.1507, abs=1e-4)

    def test_kilogram_matches_thousand_grams(self):
        assert to_troy_ounces(2.5, WeightUnit.KILOGRAM) == to_troy_ounces(2500.0, "g")

    def test_unknown_unit_raises(self):
        with pytest.raises(ValueError):
            to_troy_ounces(1.0, "lb")


class TestTroyOuncesToGrams:
    def test_one_ounce(self):
        assert troy_ounces_to_grams(1.0) == TROY_OZ_TO_GRAMS

    def test_ten_ounces(self):
        assert troy_ounces_to_grams(10.0) == pytest.approx(311.035)

    @pytest.mark.parametrize("grams", [1.0, 31.1035, 100.0, 1234.5])
    def test_grams_round_trip(self, grams):
        assert troy_ounces_to_grams(to_troy_ounces(grams, "g")) == pytest.approx(grams)
