"""Silver quote model and provider payload normalization.

Every price provider speaks a slightly different JSON dialect. This module
folds them into one immutable ``Quote`` so the rest of SilverTracker never
sees provider-specific fields.

Supported payload shapes:
    Flat:   {"price": 31.4, "prev_close_price": 30.9, ...}
    Nested: {"metals": {"silver": 31.4, ...}, ...}

When a provider only reports the current price, the remaining fields are
derived from it with fixed offsets. This is a known approximation, not
real market data.

"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

METAL_SYMBOL = "XAG"
CURRENCY = "USD"

SOURCE_FALLBACK = "fallback"
SOURCE_SIMULATED = "simulated"

FALLBACK_PRICE = 31.25

# Offsets applied to the current price when a provider omits the field
PREV_CLOSE_OFFSET = -0.50
OPEN_OFFSET = 0.15
LOW_OFFSET = -0.80
HIGH_OFFSET = 0.60

# Flat-payload keys mapped to Quote fields
_OPTIONAL_FIELDS: dict[str, tuple[str, float]] = {
    "prev_close_price": ("previous_close", PREV_CLOSE_OFFSET),
    "open_price": ("open", OPEN_OFFSET),
    "high_price": ("high", HIGH_OFFSET),
    "low_price": ("low", LOW_OFFSET),
}


class QuoteFormatError(ValueError):
    """Raised when a provider payload has no usable silver price."""


@dataclass(frozen=True)
class Quote:
    """A single silver market snapshot, in USD per troy ounce.

    Attributes:
        price: Current spot price. Always positive.
        previous_close: Previous close, or None when unknown.
        open: Opening price (informational).
        high: Session high (informational).
        low: Session low (informational).
        timestamp: UTC instant the quote was captured.
        source: Provenance tag, e.g. "metals.dev" or "fallback".
        metal: Metal symbol.
        currency: Quote currency.
        previous_close_derived: True when previous_close was computed from
            the price with a fixed offset rather than reported by the
            provider. Changes measured against it are synthetic.

    """

    price: float
    previous_close: float | None
    open: float
    high: float
    low: float
    timestamp: datetime
    source: str
    metal: str = METAL_SYMBOL
    currency: str = CURRENCY
    previous_close_derived: bool = False

    @property
    def is_fallback(self) -> bool:
        """True if this quote was substituted after a failed fetch."""
        return self.source == SOURCE_FALLBACK

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "price": self.price,
            "previous_close": self.previous_close,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "metal": self.metal,
            "currency": self.currency,
            "is_fallback": self.is_fallback,
            "previous_close_derived": self.previous_close_derived,
        }


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def derive_quote(
    price: float,
    source: str,
    timestamp: datetime | None = None,
) -> Quote:
    """Build a quote from a bare price using the fixed offsets."""
    return Quote(
        price=price,
        previous_close=price + PREV_CLOSE_OFFSET,
        open=price + OPEN_OFFSET,
        high=price + HIGH_OFFSET,
        low=price + LOW_OFFSET,
        timestamp=timestamp or datetime.now(tz=UTC),
        source=source,
        previous_close_derived=True,
    )


def fallback_quote() -> Quote:
    """Return the fixed quote used whenever a live fetch fails."""
    return derive_quote(FALLBACK_PRICE, SOURCE_FALLBACK)


def _extract_price(payload: Any) -> float:
    if not isinstance(payload, dict):
        msg = f"Expected a JSON object, got {type(payload).__name__}"
        raise QuoteFormatError(msg)

    metals = payload.get("metals")
    if isinstance(metals, dict) and "silver" in metals:
        price = metals["silver"]
    elif "price" in payload:
        price = payload["price"]
    else:
        msg = "Payload has neither 'price' nor 'metals.silver'"
        raise QuoteFormatError(msg)

    if not _is_number(price) or price <= 0:
        msg = f"Silver price must be a positive number, got {price!r}"
        raise QuoteFormatError(msg)
    return float(price)


def normalize_payload(
    payload: Any,
    source: str,
    timestamp: datetime | None = None,
) -> Quote:
    """Normalize a provider response into a ``Quote``.

    Args:
        payload: Decoded JSON body from the provider.
        source: Provenance tag to attach.
        timestamp: Capture instant. Defaults to now (UTC).

    Returns:
        Canonical quote. Optional fields the payload lacks are derived
        from the price with the fixed offsets, and a derived previous
        close is flagged on the quote.

    Raises:
        QuoteFormatError: If no positive numeric silver price is present.

    """
    price = _extract_price(payload)
    fields: dict[str, float] = {}
    for key, (field_name, offset) in _OPTIONAL_FIELDS.items():
        raw = payload.get(key)
        fields[field_name] = float(raw) if _is_number(raw) else price + offset

    return Quote(
        price=price,
        timestamp=timestamp or datetime.now(tz=UTC),
        source=source,
        previous_close_derived=not _is_number(payload.get("prev_close_price")),
        **fields,
    )
