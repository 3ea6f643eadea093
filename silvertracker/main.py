"""SilverTracker sidecar entry point.

Communicates with the presentation process via stdin/stdout using
newline-delimited JSON messages.

Protocol:
    Request:  {"id": "uuid", "method": "string", "params": {}}
    Response: {"id": "uuid", "result": {}}
    Error:    {"id": "uuid", "error": {"message": "string"}}

The session (settings, price provider, database, view model) is built
once at startup and handed to every request.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import duckdb
import numpy as np

from silvertracker import log_config
from silvertracker.config import Settings, load_settings
from silvertracker.db.connection import init_db
from silvertracker.market.provider import PriceProvider, get_provider
from silvertracker.portfolio.holding import HoldingForm
from silvertracker.portfolio.view_model import PortfolioViewModel

logger = logging.getLogger(__name__)


class _SidecarEncoder(json.JSONEncoder):
    """JSON encoder that handles dates and NumPy types."""

    def default(self, o: Any) -> Any:
        """Convert dates and NumPy types to JSON-serializable values."""
        if isinstance(o, datetime | date):
            return o.isoformat()
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return float(o)
        return super().default(o)


@dataclass
class Session:
    """Long-lived collaborators shared by all requests."""

    settings: Settings
    provider: PriceProvider
    conn: duckdb.DuckDBPyConnection
    view_model: PortfolioViewModel

    def close(self) -> None:
        """Stop refreshing and release the database."""
        self.view_model.close()
        self.conn.close()


def build_session(settings: Settings) -> Session:
    """Construct the provider, database and view model once.

    Raises:
        ValueError: If the configured provider is unknown.
        OSError: If the provider's API key is missing.

    """
    provider = get_provider(settings.provider, settings)
    conn = init_db(settings.db_path)
    view_model = PortfolioViewModel(
        provider,
        conn=conn,
        refresh_seconds=settings.refresh_seconds,
    )
    return Session(settings, provider, conn, view_model)


def _parse_since(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        msg = f"since must be an ISO-8601 timestamp, got '{value}'"
        raise ValueError(msg) from exc


def _handle_history(session: Session, days: int = 7) -> list[dict[str, Any]]:
    return [q.to_dict() for q in session.view_model.history(days)]


def _handle_refresh(session: Session) -> dict[str, Any]:
    session.view_model.refresh()
    return session.view_model.state()


def _handle_add_holding(session: Session, **form: Any) -> dict[str, Any]:
    result = session.view_model.add_holding(HoldingForm.from_dict(form))
    return result.to_dict()


def _handle_delete_holding(session: Session, id: str) -> dict[str, Any]:  # noqa: A002
    return session.view_model.delete_holding(id).to_dict()


def _handle_reload(session: Session) -> dict[str, Any]:
    result = session.view_model.load_holdings()
    return {"status": result.status.value, "error": result.error}


def _handle_price_history(
    session: Session,
    since: str,
    source: str | None = None,
) -> dict[str, Any]:
    return session.view_model.price_history_since(
        _parse_since(since), source=source
    ).to_dict()


def dispatch(session: Session, method: str, params: dict[str, Any]) -> Any:
    """Route a method call to the appropriate handler.

    Args:
        session: The running session.
        method: The method name (e.g., "portfolio.state").
        params: The parameters for the method.

    Returns:
        The result of the method call.

    Raises:
        ValueError: If the method is not recognized.

    """
    vm = session.view_model
    handlers: dict[str, Any] = {
        # Quotes
        "quote.current": lambda: vm.quote.to_dict() if vm.quote else None,
        "quote.history": lambda **kw: _handle_history(session, **kw),
        "quote.refresh": lambda: _handle_refresh(session),
        # Portfolio
        "portfolio.state": vm.state,
        "portfolio.new_form": lambda: vm.new_form().to_dict(),
        "portfolio.add_holding": lambda **kw: _handle_add_holding(session, **kw),
        "portfolio.delete_holding": lambda **kw: _handle_delete_holding(session, **kw),
        "portfolio.reload": lambda: _handle_reload(session),
        # Price history
        "price_history.since": lambda **kw: _handle_price_history(session, **kw),
    }
    if method not in handlers:
        msg = f"Unknown method: {method}"
        raise ValueError(msg)
    return handlers[method](**params)


def serve(session: Session) -> None:
    """Run the message loop until stdin is closed.

    Reads newline-delimited JSON from stdin, dispatches to handlers,
    and writes JSON responses to stdout.
    """
    for raw_line in sys.stdin:
        stripped = raw_line.strip()
        if not stripped:
            continue

        request: dict[str, Any] = {}
        try:
            request = json.loads(stripped)
            request_id = request.get("id", "unknown")
            method = request["method"]
            params = request.get("params", {})
            result = dispatch(session, method, params)
            response: dict[str, Any] = {"id": request_id, "result": result}
        except Exception as exc:  # noqa: BLE001 - dispatcher must catch all errors and return them as JSON
            request_id = (
                request.get("id", "unknown") if isinstance(request, dict) else "unknown"
            )
            response = {
                "id": request_id,
                "error": {
                    "message": str(exc),
                    "traceback": traceback.format_exc(),
                },
            }
        sys.stdout.write(json.dumps(response, cls=_SidecarEncoder) + "\n")
        sys.stdout.flush()


def main() -> None:
    """Configure logging, build the session, and serve until EOF."""
    settings = load_settings()
    log_config.setup(verbose=settings.verbose)
    session = build_session(settings)
    session.view_model.start()
    try:
        serve(session)
    finally:
        session.close()


if __name__ == "__main__":
    main()
