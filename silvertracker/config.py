"""Runtime settings for SilverTracker.

Settings are read from the environment once, at process start, and the
resulting ``Settings`` value is passed explicitly to whatever needs it.

Environment variables:
    SILVERTRACKER_PROVIDER: Price provider name (default "metals-dev").
    METALS_DEV_API_KEY: API key for the metals.dev provider.
    GOLDAPI_API_KEY: Access token for the goldapi.io provider.
    SILVERTRACKER_DB_PATH: DuckDB file path, or ":memory:".
    SILVERTRACKER_REFRESH_SECONDS: Background refresh interval.
    SILVERTRACKER_VERBOSE: "1"/"true" enables DEBUG logging.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_PROVIDER = "metals-dev"
DEFAULT_REFRESH_SECONDS = 30.0
DEFAULT_DB_PATH = Path.home() / ".silvertracker" / "data" / "silver.duckdb"
MEMORY_DB = ":memory:"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration.

    Attributes:
        provider: Registry name of the price provider.
        metals_dev_api_key: Credential for metals.dev, if configured.
        goldapi_api_key: Credential for goldapi.io, if configured.
        db_path: DuckDB file path, or None for an in-memory database.
        refresh_seconds: Interval between background price refreshes.
        verbose: Enable DEBUG logging.

    """

    provider: str = DEFAULT_PROVIDER
    metals_dev_api_key: str = ""
    goldapi_api_key: str = ""
    db_path: Path | None = DEFAULT_DB_PATH
    refresh_seconds: float = DEFAULT_REFRESH_SECONDS
    verbose: bool = False


def _parse_refresh(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        msg = f"SILVERTRACKER_REFRESH_SECONDS must be a number, got '{raw}'"
        raise ValueError(msg) from exc
    if value <= 0:
        msg = f"SILVERTRACKER_REFRESH_SECONDS must be positive, got {value}"
        raise ValueError(msg)
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Populated, immutable settings.

    Raises:
        ValueError: If the refresh interval is not a positive number.

    """
    env = os.environ if environ is None else environ

    raw_db = env.get("SILVERTRACKER_DB_PATH", "").strip()
    if not raw_db:
        db_path: Path | None = DEFAULT_DB_PATH
    elif raw_db == MEMORY_DB:
        db_path = None
    else:
        db_path = Path(raw_db).expanduser()

    raw_refresh = env.get("SILVERTRACKER_REFRESH_SECONDS", "").strip()
    refresh = _parse_refresh(raw_refresh) if raw_refresh else DEFAULT_REFRESH_SECONDS

    return Settings(
        provider=env.get("SILVERTRACKER_PROVIDER", "").strip() or DEFAULT_PROVIDER,
        metals_dev_api_key=env.get("METALS_DEV_API_KEY", "").strip(),
        goldapi_api_key=env.get("GOLDAPI_API_KEY", "").strip(),
        db_path=db_path,
        refresh_seconds=refresh,
        verbose=env.get("SILVERTRACKER_VERBOSE", "").strip().lower() in _TRUTHY,
    )
