"""Synthetic silver price history.

None of the supported providers offer historical data on their free
tiers, so the history series is a SIMULATION: independent uniform
perturbations around a single real (or fallback) quote. It is labelled
with the "simulated" source and must never be presented as market history.

"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import numpy as np

from silvertracker.market.quote import SOURCE_SIMULATED, Quote

# Half-width of the uniform band around the seed price (USD)
VARIATION_BAND = 2.0
# Floor that keeps simulated prices positive
MIN_PRICE = 0.1

# Fixed offsets for the informational fields of simulated quotes
_PREV_CLOSE_OFFSET = -0.10
_OPEN_OFFSET = 0.05
_LOW_OFFSET = -0.20
_HIGH_OFFSET = 0.30


def simulate_history(
    seed_quote: Quote,
    days: int = 7,
    seed: int | None = None,
    now: datetime | None = None,
) -> list[Quote]:
    """Generate ``days + 1`` simulated daily quotes, oldest first.

    Args:
        seed_quote: Quote whose price anchors the simulation.
        days: Number of days to look back. Zero yields just today.
        seed: Random seed. None (default) draws fresh entropy per call.
        now: Anchor instant for the newest quote. Defaults to now (UTC).

    Returns:
        List of quotes, one per day, prices rounded to cents.

    Raises:
        ValueError: If days is negative.

    """
    if days < 0:
        msg = f"days must be >= 0, got {days}"
        raise ValueError(msg)

    rng = np.random.default_rng(seed)
    variations = rng.uniform(-VARIATION_BAND, VARIATION_BAND, size=days + 1)
    anchor = now or datetime.now(tz=UTC)

    history: list[Quote] = []
    for offset, variation in zip(range(days, -1, -1), variations, strict=True):
        price = round(max(seed_quote.price + float(variation), MIN_PRICE), 2)
        history.append(
            Quote(
                price=price,
                previous_close=round(price + _PREV_CLOSE_OFFSET, 2),
                open=round(price + _OPEN_OFFSET, 2),
                high=round(price + _HIGH_OFFSET, 2),
                low=round(price + _LOW_OFFSET, 2),
                timestamp=anchor - timedelta(days=offset),
                source=SOURCE_SIMULATED,
                previous_close_derived=True,
            )
        )
    return history
