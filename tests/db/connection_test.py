"""Tests for DuckDB connection management."""

from __future__ import annotations

import tempfile
from pathlib import Path

from silvertracker.db.connection import get_connection, init_db, init_memory_db


class TestGetConnection:
    """Tests for database connection factory."""

    def test_in_memory_connection(self):
        conn = get_connection(None)
        assert conn is not None
        conn.execute("SELECT 1").fetchone()
        conn.close()

    def test_creates_parent_directories(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "nested" / "deep" / "silver.duckdb"
            conn = get_connection(db_path)
            conn.execute("SELECT 1").fetchone()
            conn.close()
            assert db_path.parent.exists()


class TestInitDb:
    """Tests for schema initialization."""

    def test_creates_all_tables(self):
        conn = init_memory_db()
        tables = {t[0] for t in conn.execute("SHOW TABLES").fetchall()}
        assert tables == {"silver_assets", "silver_price_history"}
        conn.close()

    def test_tables_are_empty(self):
        conn = init_memory_db()
        for table in ("silver_assets", "silver_price_history"):
            count = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]  # noqa: S608
            assert count == 0
        conn.close()

    def test_file_database_persists(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "silver.duckdb"
            conn = init_db(db_path)
            conn.execute(
                "INSERT INTO silver_price_history "
                "(id, price_per_oz, date, source, created_at) "
                "VALUES ('p1', 31.0, TIMESTAMP '2024-06-01 12:00:00', 'test', "
                "TIMESTAMP '2024-06-01 12:00:05')"
            )
            conn.close()

            reopened = init_db(db_path)
            count = reopened.execute(
                "SELECT COUNT(*) FROM silver_price_history"
            ).fetchone()[0]
            reopened.close()
            assert count == 1

    def test_read_only_connection(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "silver.duckdb"
            init_db(db_path).close()
            conn = get_connection(db_path, read_only=True)
            tables = {t[0] for t in conn.execute("SHOW TABLES").fetchall()}
            conn.close()
            assert "silver_assets" in tables
