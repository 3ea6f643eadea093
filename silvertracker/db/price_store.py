"""Price history store: DuckDB CRUD for ``silver_price_history``.

Each loaded quote can be logged with its provenance, so fallback and
simulated prices stay distinguishable from live ones.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import duckdb

from silvertracker.db.result import StoreResult

if TYPE_CHECKING:
    from silvertracker.market.quote import Quote

logger = logging.getLogger(__name__)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def record_price(conn: duckdb.DuckDBPyConnection, quote: Quote) -> StoreResult:
    """Insert a price snapshot for a quote.

    Args:
        conn: Active DuckDB connection.
        quote: Quote to record; its timestamp becomes the row date.

    Returns:
        OK with the inserted row, or FAILED.

    """
    try:
        result = conn.execute(
            """
            INSERT INTO silver_price_history
                (id, price_per_oz, date, source, created_at)
            VALUES (?, ?, ?, ?, ?)
            RETURNING *
            """,
            [
                uuid.uuid4().hex,
                quote.price,
                _naive_utc(quote.timestamp),
                quote.source,
                _naive_utc(datetime.now(tz=UTC)),
            ],
        ).fetchall()
        columns = [desc[0] for desc in conn.description]
    except duckdb.Error as exc:
        logger.exception("Failed to record silver price %.4f", quote.price)
        return StoreResult.failed(exc)

    return StoreResult.ok([dict(zip(columns, row, strict=True)) for row in result])


def prices_since(
    conn: duckdb.DuckDBPyConnection,
    since: datetime,
    source: str | None = None,
) -> StoreResult:
    """Query price snapshots at or after a timestamp.

    Args:
        conn: Active DuckDB connection.
        since: Minimum snapshot timestamp (naive values are UTC).
        source: Optional provenance filter, e.g. "metals.dev".

    Returns:
        OK with rows ordered by date descending, EMPTY, or FAILED.

    """
    query = "SELECT * FROM silver_price_history WHERE date >= ?"
    params: list[Any] = [_naive_utc(since)]
    if source:
        query += " AND source = ?"
        params.append(source)
    query += " ORDER BY date DESC"

    try:
        result = conn.execute(query, params).fetchall()
        columns = [desc[0] for desc in conn.description]
    except duckdb.Error as exc:
        logger.exception("Failed to query silver price history")
        return StoreResult.failed(exc)

    return StoreResult.ok([dict(zip(columns, row, strict=True)) for row in result])
