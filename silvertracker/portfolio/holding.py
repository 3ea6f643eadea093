"""Silver holdings and the add-holding form.

A ``Holding`` is one recorded purchase. It is created only from a valid
``HoldingForm`` (or re-hydrated from the asset store) and never mutated
afterwards. The spot price at purchase is copied onto the holding and is
independent of any later quote.

"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from silvertracker.portfolio.units import WeightUnit, parse_unit, to_troy_ounces


@dataclass(frozen=True)
class Holding:
    """A single silver purchase.

    Attributes:
        id: Opaque unique identifier.
        name: Display name, e.g. "American Silver Eagle".
        purchase_price: Total amount paid (USD).
        silver_price_at_purchase: Spot price per troy ounce when bought.
        silver_weight_oz: Silver content in troy ounces.
        purchase_date: Calendar date of the purchase.
        created_at: UTC instant the record was created.
        updated_at: UTC instant of the last modification.

    """

    id: str
    name: str
    purchase_price: float
    silver_price_at_purchase: float
    silver_weight_oz: float
    purchase_date: date
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "id": self.id,
            "name": self.name,
            "purchase_price": self.purchase_price,
            "silver_price_at_purchase": self.silver_price_at_purchase,
            "silver_weight_oz": self.silver_weight_oz,
            "purchase_date": self.purchase_date.isoformat(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Holding:
        """Build a holding from a ``silver_assets`` row.

        Naive timestamps from the database are interpreted as UTC.
        """
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            purchase_price=float(record["purchase_price"]),
            silver_price_at_purchase=float(record["silver_price_at_purchase"]),
            silver_weight_oz=float(record["silver_weight_oz"]),
            purchase_date=_as_date(record["purchase_date"]),
            created_at=_as_utc(record["created_at"]),
            updated_at=_as_utc(record["updated_at"]),
        )


def _as_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_utc(value: datetime | str) -> datetime:
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _today() -> date:
    return datetime.now(tz=UTC).date()


@dataclass
class HoldingForm:
    """Mutable state of the add-holding form.

    Defaults mirror an empty form: zero amounts, troy ounces, and today's
    date pre-filled.
    """

    name: str = ""
    purchase_price: float = 0.0
    silver_price_at_purchase: float = 0.0
    weight: float = 0.0
    weight_unit: str = WeightUnit.TROY_OUNCE.value
    purchase_date: date | None = field(default_factory=_today)

    def reset(self) -> None:
        """Clear the form back to its defaults, with today's date."""
        blank = HoldingForm()
        self.name = blank.name
        self.purchase_price = blank.purchase_price
        self.silver_price_at_purchase = blank.silver_price_at_purchase
        self.weight = blank.weight
        self.weight_unit = blank.weight_unit
        self.purchase_date = blank.purchase_date

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "name": self.name,
            "purchase_price": self.purchase_price,
            "silver_price_at_purchase": self.silver_price_at_purchase,
            "weight": self.weight,
            "weight_unit": self.weight_unit,
            "purchase_date": (
                self.purchase_date.isoformat() if self.purchase_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HoldingForm:
        """Build a form from loosely-typed input (e.g. a JSON request).

        Values that cannot be read as numbers become 0, which validation
        then rejects; an unparseable date becomes None.
        """
        raw_date = data.get("purchase_date")
        purchase_date: date | None
        if isinstance(raw_date, date):
            purchase_date = _as_date(raw_date)
        else:
            try:
                purchase_date = date.fromisoformat(str(raw_date)) if raw_date else None
            except ValueError:
                purchase_date = None

        return cls(
            name=str(data.get("name") or ""),
            purchase_price=_to_float(data.get("purchase_price")),
            silver_price_at_purchase=_to_float(data.get("silver_price_at_purchase")),
            weight=_to_float(data.get("weight")),
            weight_unit=str(data.get("weight_unit") or WeightUnit.TROY_OUNCE.value),
            purchase_date=purchase_date,
        )


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def validate_form(form: HoldingForm) -> list[str]:
    """Check a form before it becomes a holding.

    Returns:
        List of human-readable problems. Empty when the form is valid.

    """
    errors: list[str] = []
    if not form.name.strip():
        errors.append("name must not be empty")
    if not _is_positive(form.purchase_price):
        errors.append("purchase_price must be a finite number greater than 0")
    if not _is_positive(form.silver_price_at_purchase):
        errors.append("silver_price_at_purchase must be a finite number greater than 0")
    if not _is_positive(form.weight):
        errors.append("weight must be a finite number greater than 0")
    try:
        parse_unit(form.weight_unit)
    except ValueError as exc:
        errors.append(str(exc))
    if form.purchase_date is None:
        errors.append("purchase_date is required")
    return errors


def build_holding(form: HoldingForm, now: datetime | None = None) -> Holding:
    """Create a holding from a form, converting weight to troy ounces.

    Args:
        form: Form state. Must already pass ``validate_form``.
        now: Creation instant. Defaults to now (UTC).

    Returns:
        New holding with a fresh id.

    Raises:
        ValueError: If the form is invalid.

    """
    errors = validate_form(form)
    if errors or form.purchase_date is None:
        msg = f"Invalid holding form: {'; '.join(errors)}"
        raise ValueError(msg)

    created = now or datetime.now(tz=UTC)
    return Holding(
        id=uuid.uuid4().hex,
        name=form.name.strip(),
        purchase_price=form.purchase_price,
        silver_price_at_purchase=form.silver_price_at_purchase,
        silver_weight_oz=to_troy_ounces(form.weight, form.weight_unit),
        purchase_date=form.purchase_date,
        created_at=created,
        updated_at=created,
    )


@dataclass(frozen=True)
class AddHoldingResult:
    """Outcome of the add-holding workflow.

    Attributes:
        holding: The appended holding, or None when rejected.
        errors: Validation problems; empty on success.

    """

    holding: Holding | None = None
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """True if a holding was created."""
        return self.holding is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "ok": self.ok,
            "holding": self.holding.to_dict() if self.holding else None,
            "errors": list(self.errors),
        }
