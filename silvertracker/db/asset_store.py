"""Asset store: DuckDB CRUD for the ``silver_assets`` table.

Database errors are logged and returned as ``StoreResult.failed``; they
are never raised to the caller and never reported as an empty result.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import duckdb

from silvertracker.db.result import StoreResult

if TYPE_CHECKING:
    from silvertracker.portfolio.holding import Holding

logger = logging.getLogger(__name__)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _fetch_dicts(
    conn: duckdb.DuckDBPyConnection,
    query: str,
    params: list[Any] | None = None,
) -> list[dict[str, Any]]:
    result = conn.execute(query, params or []).fetchall()
    columns = [desc[0] for desc in conn.description]
    return [dict(zip(columns, row, strict=True)) for row in result]


def insert_asset(conn: duckdb.DuckDBPyConnection, holding: Holding) -> StoreResult:
    """Insert a holding and return the stored record.

    Args:
        conn: Active DuckDB connection.
        holding: Holding to persist (weight already in troy ounces).

    Returns:
        OK with the inserted row, or FAILED.

    """
    try:
        rows = _fetch_dicts(
            conn,
            """
            INSERT INTO silver_assets
                (id, name, purchase_price, silver_price_at_purchase,
                 purchase_date, silver_weight_oz, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING *
            """,
            [
                holding.id,
                holding.name,
                holding.purchase_price,
                holding.silver_price_at_purchase,
                holding.purchase_date,
                holding.silver_weight_oz,
                _naive_utc(holding.created_at),
                _naive_utc(holding.updated_at),
            ],
        )
    except duckdb.Error as exc:
        logger.exception("Failed to insert silver asset %s", holding.id)
        return StoreResult.failed(exc)

    logger.info("Added silver asset %s (%.4f oz)", holding.name, holding.silver_weight_oz)
    return StoreResult.ok(rows)


def list_assets(conn: duckdb.DuckDBPyConnection) -> StoreResult:
    """Get all assets, newest first.

    Returns:
        OK with rows ordered by created_at descending, EMPTY, or FAILED.

    """
    try:
        rows = _fetch_dicts(
            conn,
            "SELECT * FROM silver_assets ORDER BY created_at DESC, id",
        )
    except duckdb.Error as exc:
        logger.exception("Failed to list silver assets")
        return StoreResult.failed(exc)
    return StoreResult.ok(rows)


def delete_asset(conn: duckdb.DuckDBPyConnection, asset_id: str) -> StoreResult:
    """Delete an asset by id.

    Returns:
        OK with the deleted id, EMPTY if no asset had that id, or FAILED.

    """
    try:
        rows = _fetch_dicts(
            conn,
            "DELETE FROM silver_assets WHERE id = ? RETURNING id",
            [asset_id],
        )
    except duckdb.Error as exc:
        logger.exception("Failed to delete silver asset %s", asset_id)
        return StoreResult.failed(exc)

    if rows:
        logger.info("Deleted silver asset %s", asset_id)
    return StoreResult.ok(rows)
