"""DuckDB schema definitions for SilverTracker.

Contains DDL statements for:
- silver_assets: Recorded purchases (weights in troy ounces)
- silver_price_history: Timestamped spot price snapshots with provenance

Timestamps are stored as naive UTC.

"""

from __future__ import annotations

# ── Silver Assets ──

CREATE_SILVER_ASSETS = """
CREATE TABLE IF NOT EXISTS silver_assets (
    id                        VARCHAR PRIMARY KEY,
    name                      VARCHAR NOT NULL,
    purchase_price            DOUBLE NOT NULL,
    silver_price_at_purchase  DOUBLE NOT NULL,
    purchase_date             DATE NOT NULL,
    silver_weight_oz          DOUBLE NOT NULL,
    created_at                TIMESTAMP NOT NULL,
    updated_at                TIMESTAMP NOT NULL
);
"""

# ── Price History ──

CREATE_SILVER_PRICE_HISTORY = """
CREATE TABLE IF NOT EXISTS silver_price_history (
    id            VARCHAR PRIMARY KEY,
    price_per_oz  DOUBLE NOT NULL,
    date          TIMESTAMP NOT NULL,
    source        VARCHAR NOT NULL,
    created_at    TIMESTAMP NOT NULL
);
"""

# All DDL statements in creation order
ALL_TABLES: list[str] = [
    CREATE_SILVER_ASSETS,
    CREATE_SILVER_PRICE_HISTORY,
]
