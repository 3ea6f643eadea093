"""Portfolio valuation for silver holdings.

Every figure here is a pure function of the holdings list and the current
spot price. Nothing is cached: callers recompute on every render/query.
Rounding is applied only when serializing (``to_dict``), never to the
internal values, so ``total_worth - total_invested == profit_loss`` holds
exactly.

Holding status thresholds (strict less-than; ties go to the milder class):
    loss           current worth < melt value at purchase spot
    breaking-even  current worth < price paid
    profit         otherwise

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from silvertracker.portfolio.units import troy_ounces_to_grams

if TYPE_CHECKING:
    from silvertracker.market.quote import Quote
    from silvertracker.portfolio.holding import Holding


class HoldingStatus(Enum):
    """Where a holding's current worth sits relative to what was paid."""

    LOSS = "loss"
    BREAKING_EVEN = "breaking-even"
    PROFIT = "profit"


def current_worth(holding: Holding, current_price: float) -> float:
    """Melt value of a holding at the current spot price."""
    return holding.silver_weight_oz * current_price


def value_at_purchase(holding: Holding) -> float:
    """Melt value of a holding at the spot price it was bought at."""
    return holding.silver_weight_oz * holding.silver_price_at_purchase


def collectors_premium(holding: Holding) -> float:
    """Amount paid above melt value at purchase time."""
    return holding.purchase_price - value_at_purchase(holding)


def holding_profit_loss(holding: Holding, current_price: float) -> float:
    """Current melt value minus the price paid."""
    return current_worth(holding, current_price) - holding.purchase_price


def holding_status(holding: Holding, current_price: float) -> HoldingStatus:
    """Classify a holding as loss, breaking-even, or profit."""
    worth = current_worth(holding, current_price)
    if worth < value_at_purchase(holding):
        return HoldingStatus.LOSS
    if worth < holding.purchase_price:
        return HoldingStatus.BREAKING_EVEN
    return HoldingStatus.PROFIT


def total_worth(holdings: Iterable[Holding], current_price: float) -> float:
    """Sum of current melt values."""
    return sum((current_worth(h, current_price) for h in holdings), 0.0)


def total_invested(holdings: Iterable[Holding]) -> float:
    """Sum of prices paid."""
    return sum((h.purchase_price for h in holdings), 0.0)


def total_grams(holdings: Iterable[Holding]) -> float:
    """Total silver weight in grams."""
    return sum((troy_ounces_to_grams(h.silver_weight_oz) for h in holdings), 0.0)


def total_premium_paid(holdings: Iterable[Holding]) -> float:
    """Sum of collector's premiums."""
    return sum((collectors_premium(h) for h in holdings), 0.0)


def profit_loss(holdings: Iterable[Holding], current_price: float) -> float:
    """Total worth minus total invested."""
    items = list(holdings)
    return total_worth(items, current_price) - total_invested(items)


def weekly_change_pct(quote: Quote) -> float | None:
    """Percent change from previous close to the current price.

    Returns:
        The change, or None when the previous close is missing or not
        positive.

    """
    previous = quote.previous_close
    if previous is None or previous <= 0:
        return None
    return (quote.price - previous) / previous * 100.0


@dataclass
class HoldingValuation:
    """Derived figures for one holding at a given spot price."""

    holding: Holding
    current_worth: float
    value_at_purchase: float
    collectors_premium: float
    profit_loss: float
    status: HoldingStatus

    def to_dict(self) -> dict[str, Any]:
        """Serialize with money rounded to cents for display."""
        return {
            **self.holding.to_dict(),
            "current_worth": round(self.current_worth, 2),
            "value_at_purchase": round(self.value_at_purchase, 2),
            "collectors_premium": round(self.collectors_premium, 2),
            "profit_loss": round(self.profit_loss, 2),
            "status": self.status.value,
        }


@dataclass
class PortfolioSummary:
    """Point-in-time valuation of all holdings.

    Attributes:
        current_price: Spot price used (0.0 before the first quote).
        total_worth: Sum of current melt values.
        total_invested: Sum of prices paid.
        total_premium_paid: Sum of collector's premiums.
        total_grams: Total silver weight in grams.
        profit_loss: total_worth - total_invested.
        holdings: Per-holding valuations, in list order.

    """

    current_price: float = 0.0
    total_worth: float = 0.0
    total_invested: float = 0.0
    total_premium_paid: float = 0.0
    total_grams: float = 0.0
    profit_loss: float = 0.0
    holdings: list[HoldingValuation] = field(default_factory=list)

    @property
    def is_profit(self) -> bool:
        """True when the portfolio is at or above what was paid."""
        return self.profit_loss >= 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize with money rounded to cents for display."""
        return {
            "current_price": self.current_price,
            "total_worth": round(self.total_worth, 2),
            "total_invested": round(self.total_invested, 2),
            "total_premium_paid": round(self.total_premium_paid, 2),
            "total_grams": round(self.total_grams, 3),
            "profit_loss": round(self.profit_loss, 2),
            "is_profit": self.is_profit,
            "holdings": [h.to_dict() for h in self.holdings],
        }


def value_holding(holding: Holding, current_price: float) -> HoldingValuation:
    """Compute every derived figure for one holding."""
    return HoldingValuation(
        holding=holding,
        current_worth=current_worth(holding, current_price),
        value_at_purchase=value_at_purchase(holding),
        collectors_premium=collectors_premium(holding),
        profit_loss=holding_profit_loss(holding, current_price),
        status=holding_status(holding, current_price),
    )


def summarize_portfolio(
    holdings: Iterable[Holding],
    quote: Quote | None,
) -> PortfolioSummary:
    """Value the whole portfolio against a quote.

    Args:
        holdings: Holdings to value.
        quote: Latest quote, or None before the first load (price 0.0).

    Returns:
        Aggregates plus per-holding valuations.

    """
    items = list(holdings)
    price = quote.price if quote is not None else 0.0
    worth = total_worth(items, price)
    invested = total_invested(items)
    return PortfolioSummary(
        current_price=price,
        total_worth=worth,
        total_invested=invested,
        total_premium_paid=total_premium_paid(items),
        total_grams=total_grams(items),
        profit_loss=worth - invested,
        holdings=[value_holding(h, price) for h in items],
    )
