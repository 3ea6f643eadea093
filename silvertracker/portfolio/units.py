"""Weight units and conversion to troy ounces.

Holdings always store weight in troy ounces; the unit a weight was entered
in is not retained after conversion.
"""

from __future__ import annotations

from enum import Enum

# Grams per troy ounce
TROY_OZ_TO_GRAMS = 31.1035


class WeightUnit(Enum):
    """Units accepted by the add-holding form."""

    TROY_OUNCE = "oz"
    GRAM = "g"
    KILOGRAM = "kg"


def parse_unit(value: str | WeightUnit) -> WeightUnit:
    """Parse a unit string ("oz", "g", "kg").

    Raises:
        ValueError: If the unit is not supported.

    """
    if isinstance(value, WeightUnit):
        return value
    try:
        return WeightUnit(value)
    except ValueError as exc:
        choices = ", ".join(u.value for u in WeightUnit)
        msg = f"weight unit must be one of {choices}, got '{value}'"
        raise ValueError(msg) from exc


def to_troy_ounces(weight: float, unit: str | WeightUnit) -> float:
    """Convert a weight to troy ounces.

    Kilograms go through grams first, which keeps results numerically
    identical to ``grams / TROY_OZ_TO_GRAMS``.
    """
    parsed = parse_unit(unit)
    if parsed is WeightUnit.GRAM:
        return weight / TROY_OZ_TO_GRAMS
    if parsed is WeightUnit.KILOGRAM:
        return (weight * 1000) / TROY_OZ_TO_GRAMS
    return weight


def troy_ounces_to_grams(weight_oz: float) -> float:
    """Convert troy ounces to grams."""
    return weight_oz * TROY_OZ_TO_GRAMS
