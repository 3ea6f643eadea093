"""Vulture whitelist: references that look unused but are reached dynamically.

Items listed here are known false positives: the console-script entry
point, pytest fixtures consumed by name, sidecar handlers looked up by
method string, and HTTP handler hooks called by ``http.server``.

Usage:
    vulture silvertracker tests vulture_whitelist.py
"""

# ── Entry points (called by setuptools console_scripts, not imported) ──
from silvertracker.main import main  # noqa: F401

# ── Pytest fixtures (injected by pytest, never called directly) ──
from tests.conftest import db  # noqa: F401
from tests.conftest import reproducible_rng  # noqa: F401
from tests.conftest import sample_holding  # noqa: F401
from tests.conftest import sample_quote  # noqa: F401

# ── Public API used by the presentation process, not by Python callers ──
from silvertracker.db.result import StoreResult
from silvertracker.market.quote import Quote
from silvertracker.portfolio.refresh import RefreshTimer

Quote.is_fallback  # noqa: B018
StoreResult.first  # noqa: B018
RefreshTimer.running  # noqa: B018
RefreshTimer.join  # noqa: B018

# ── http.server hooks in the provider tests ──
from tests.market.provider_test import FakePriceHandler

FakePriceHandler.do_GET  # noqa: B018
FakePriceHandler.log_message  # noqa: B018
