"""Repeating background timer for price refreshes.

One daemon thread calls the callback every ``interval`` seconds until
``cancel()``. Ticks are not skipped or queued when a callback runs long:
the next wait starts after the callback returns.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RefreshTimer:
    """Run a callback on a fixed interval on a background thread."""

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "silver-refresh",
    ) -> None:
        if interval <= 0:
            msg = f"interval must be positive, got {interval}"
            raise ValueError(msg)
        self.interval = interval
        self._callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def running(self) -> bool:
        """True while the timer thread is alive and not cancelled."""
        return self._thread.is_alive() and not self._stopped.is_set()

    def start(self) -> None:
        """Start ticking. The first tick fires after one interval."""
        self._thread.start()

    def cancel(self) -> None:
        """Stop future ticks. A callback already running is not interrupted."""
        self._stopped.set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the timer thread to exit."""
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Scheduled refresh failed")
