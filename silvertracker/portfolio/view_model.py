"""Portfolio view model: holdings, latest quote, and refresh lifecycle.

Owns the state a presentation layer renders:

- the latest ``Quote`` (None until the first load) and when it arrived
- the holdings list (append-only except for explicit deletion)
- ``is_loading`` / ``is_refreshing`` flags for the foreground load and
  background refreshes
- the weekly change figure, flagged as simulated unless it was measured
  against a previous close the provider actually reported

Lifecycle::

    vm = PortfolioViewModel(provider, conn=conn)
    vm.start()      # immediate load, then a refresh every 30 s
    vm.refresh()    # manual refresh, same code path as the timer
    vm.close()      # cancel the timer; late results are discarded

Timer-driven and manual refreshes are not serialized against each other.
Both run to completion and whichever commits last wins.

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import numpy as np

from silvertracker.db.asset_store import delete_asset, insert_asset, list_assets
from silvertracker.db.price_store import prices_since, record_price
from silvertracker.db.result import StoreResult, StoreStatus
from silvertracker.market.quote import Quote, fallback_quote
from silvertracker.portfolio.holding import (
    AddHoldingResult,
    Holding,
    HoldingForm,
    build_holding,
    validate_form,
)
from silvertracker.portfolio.refresh import RefreshTimer
from silvertracker.portfolio.valuation import summarize_portfolio, weekly_change_pct

if TYPE_CHECKING:
    import duckdb

    from silvertracker.market.provider import PriceProvider

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 30.0

# Half-width (percent) of the placeholder band used when the quote has no
# usable previous close. The placeholder is SIMULATED, not market data.
SIMULATED_CHANGE_BAND = 4.0


class PortfolioViewModel:
    """In-memory portfolio state driven by a price provider.

    Args:
        provider: Price provider; its ``fetch_quote()`` never raises.
        conn: Optional DuckDB connection. When given, holdings are
            persisted to ``silver_assets`` and every loaded quote is
            logged to ``silver_price_history``.
        refresh_seconds: Background refresh interval.
        rng: Random generator for the simulated weekly change.
        timer_factory: Builds the repeating timer (injectable for tests).

    """

    def __init__(
        self,
        provider: PriceProvider,
        conn: duckdb.DuckDBPyConnection | None = None,
        refresh_seconds: float = DEFAULT_REFRESH_SECONDS,
        rng: np.random.Generator | None = None,
        timer_factory: Callable[[float, Callable[[], None]], RefreshTimer] = RefreshTimer,
    ) -> None:
        self.provider = provider
        self.conn = conn
        self.refresh_seconds = refresh_seconds
        self._rng = rng or np.random.default_rng()
        self._timer_factory = timer_factory
        self._timer: RefreshTimer | None = None

        self.quote: Quote | None = None
        self.holdings: list[Holding] = []
        self.is_loading = False
        self.is_refreshing = False
        self.last_updated: datetime | None = None
        self.weekly_change = 0.0
        self.weekly_change_simulated = False

        self._closed = False
        self._state_lock = threading.Lock()
        # DuckDB connections must not be used from two threads at once
        self._db_lock = threading.Lock()

    # -- Lifecycle ------------------------------------------------------------

    @property
    def closed(self) -> bool:
        """True once ``close()`` has been called."""
        return self._closed

    def start(self) -> None:
        """Load holdings and the first quote, then start the refresh timer."""
        if self._timer is not None or self._closed:
            return
        if self.conn is not None:
            self.load_holdings()
        self.load_quote(is_background_refresh=False)
        self._timer = self._timer_factory(
            self.refresh_seconds,
            lambda: self.load_quote(is_background_refresh=True),
        )
        self._timer.start()
        logger.info("Silver price refresh scheduled every %.0fs", self.refresh_seconds)

    def close(self) -> None:
        """Cancel the refresh timer and stop accepting quote results."""
        with self._state_lock:
            self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # -- Quotes ---------------------------------------------------------------

    def _set_flag(self, background: bool, value: bool) -> None:
        with self._state_lock:
            if background:
                self.is_refreshing = value
            else:
                self.is_loading = value

    def _weekly_change(self, quote: Quote) -> tuple[float, bool]:
        change = weekly_change_pct(quote)
        if change is not None:
            return change, quote.previous_close_derived
        placeholder = float(
            self._rng.uniform(-SIMULATED_CHANGE_BAND, SIMULATED_CHANGE_BAND)
        )
        return placeholder, True

    def load_quote(self, is_background_refresh: bool = False) -> Quote | None:
        """Fetch a quote and commit it as the current state.

        Args:
            is_background_refresh: Raise ``is_refreshing`` instead of
                ``is_loading`` while the fetch runs.

        Returns:
            The committed quote, or None if the view model was closed
            before the result arrived.

        """
        if self._closed:
            return None

        self._set_flag(is_background_refresh, True)
        try:
            try:
                quote = self.provider.fetch_quote()
                change, simulated = self._weekly_change(quote)
            except Exception:  # noqa: BLE001 - the view must still get a price
                logger.exception("Unexpected error loading silver quote")
                quote = fallback_quote()
                change, simulated = 0.0, True

            with self._state_lock:
                if self._closed:
                    logger.debug("Discarding quote that arrived after close")
                    return None
                self.quote = quote
                self.last_updated = datetime.now(tz=UTC)
                self.weekly_change = change
                self.weekly_change_simulated = simulated

            logger.info(
                "Silver price %.2f from %s (weekly %+.2f%%%s)",
                quote.price,
                quote.source,
                change,
                ", simulated" if simulated else "",
            )
            self._record_price(quote)
            return quote
        finally:
            self._set_flag(is_background_refresh, False)

    def refresh(self) -> Quote | None:
        """Manual refresh; identical to a timer tick."""
        return self.load_quote(is_background_refresh=True)

    def _record_price(self, quote: Quote) -> None:
        if self.conn is None:
            return
        with self._db_lock:
            result = record_price(self.conn, quote)
        if not result.succeeded:
            logger.warning("Price snapshot not recorded: %s", result.error)

    def history(self, days: int = 7) -> list[Quote]:
        """SIMULATED daily history anchored on a fresh quote."""
        return self.provider.fetch_history(days)

    def price_history_since(
        self,
        since: datetime,
        source: str | None = None,
    ) -> StoreResult:
        """Recorded price snapshots at or after ``since``, newest first."""
        if self.conn is None:
            return StoreResult.empty()
        with self._db_lock:
            return prices_since(self.conn, since, source=source)

    # -- Holdings -------------------------------------------------------------

    def new_form(self) -> HoldingForm:
        """A blank add-holding form with today's date and current spot."""
        form = HoldingForm()
        if self.quote is not None:
            form.silver_price_at_purchase = self.quote.price
        return form

    def add_holding(self, form: HoldingForm) -> AddHoldingResult:
        """Validate a form and append the resulting holding.

        On success the form is reset in place. On failure nothing changes
        and the result carries the validation errors.
        """
        errors = validate_form(form)
        if errors:
            logger.info("Rejected holding form: %s", "; ".join(errors))
            return AddHoldingResult(errors=tuple(errors))

        holding = build_holding(form)
        if self.conn is not None:
            with self._db_lock:
                result = insert_asset(self.conn, holding)
            if not result.succeeded:
                return AddHoldingResult(errors=(f"could not save holding: {result.error}",))

        with self._state_lock:
            self.holdings.append(holding)
        form.reset()
        return AddHoldingResult(holding=holding)

    def load_holdings(self) -> StoreResult:
        """Replace the in-memory holdings with the stored ones.

        The list is rebuilt oldest first, the order ``add_holding`` appends
        in. A failed read leaves the current list untouched.
        """
        if self.conn is None:
            return StoreResult.empty()
        with self._db_lock:
            result = list_assets(self.conn)
        if result.status is StoreStatus.FAILED:
            logger.warning("Keeping in-memory holdings; load failed: %s", result.error)
            return result

        loaded = [Holding.from_record(row) for row in reversed(result.rows)]
        with self._state_lock:
            self.holdings = loaded
        logger.info("Loaded %d silver holdings", len(loaded))
        return result

    def delete_holding(self, holding_id: str) -> StoreResult:
        """Delete a holding by id from the store (if any) and the list.

        Returns:
            OK with the deleted id, EMPTY if unknown, or FAILED.

        """
        if self.conn is not None:
            with self._db_lock:
                result = delete_asset(self.conn, holding_id)
            if not result.succeeded:
                return result

        with self._state_lock:
            remaining = [h for h in self.holdings if h.id != holding_id]
            removed = len(remaining) != len(self.holdings)
            self.holdings = remaining

        if self.conn is not None:
            return result
        return StoreResult.ok([{"id": holding_id}] if removed else [])

    # -- Derived state --------------------------------------------------------

    def state(self) -> dict[str, Any]:
        """Everything the presentation layer renders, as plain data.

        All fields come from one snapshot taken under the state lock, so the
        quote shown and the portfolio figures always use the same price.
        """
        with self._state_lock:
            holdings = list(self.holdings)
            quote = self.quote
            last_updated = self.last_updated
            snapshot = {
                "is_loading": self.is_loading,
                "is_refreshing": self.is_refreshing,
                "weekly_change": round(self.weekly_change, 2),
                "weekly_change_simulated": self.weekly_change_simulated,
            }
        return {
            "quote": quote.to_dict() if quote else None,
            "last_updated": last_updated.isoformat() if last_updated else None,
            **snapshot,
            "portfolio": summarize_portfolio(holdings, quote).to_dict(),
        }
