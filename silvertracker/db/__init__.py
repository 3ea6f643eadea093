"""SilverTracker database layer.

DuckDB storage for recorded silver assets and the price-history log.
Every store operation returns a ``StoreResult`` instead of raising, and
keeps "no rows" distinct from "the query failed".
"""
