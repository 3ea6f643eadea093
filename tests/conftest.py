"""Shared pytest fixtures for SilverTracker tests."""

from __future__ import annotations

from datetime import UTC, date, datetime

import numpy as np
import pytest

from silvertracker.db.connection import init_memory_db
from silvertracker.market.quote import Quote
from silvertracker.portfolio.holding import Holding


@pytest.fixture
def reproducible_rng() -> np.random.Generator:
    """Provide a seeded random number generator for deterministic tests."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def sample_quote() -> Quote:
    """Quote with a real previous close: 30.00 now, 29.00 before."""
    return Quote(
        price=30.0,
        previous_close=29.0,
        open=29.5,
        high=30.4,
        low=28.9,
        timestamp=datetime(2024, 6, 3, 15, 0, tzinfo=UTC),
        source="metals.dev",
    )


@pytest.fixture
def sample_holding() -> Holding:
    """Ten ounces bought for 500.00 when spot was 28.00."""
    created = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    return Holding(
        id="h-eagles",
        name="American Silver Eagle x10",
        purchase_price=500.0,
        silver_price_at_purchase=28.0,
        silver_weight_oz=10.0,
        purchase_date=date(2024, 5, 1),
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def db():
    """In-memory DuckDB connection with the full schema."""
    conn = init_memory_db()
    yield conn
    conn.close()
