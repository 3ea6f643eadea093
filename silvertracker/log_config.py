"""Logging configuration for the SilverTracker sidecar.

Call ``setup()`` once at the top of ``main()``. Records go to stderr;
stdout carries nothing but protocol responses.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Chatty third-party loggers reached through the Yahoo provider
_QUIET_LOGGERS = ("yfinance", "urllib3", "peewee")


def setup(*, verbose: bool = False) -> None:
    """Configure the root logger on stderr.

    Args:
        verbose: If True, log SilverTracker and its dependencies at DEBUG.
            Otherwise SilverTracker logs at INFO and the Yahoo-related
            third-party loggers are held at WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
        datefmt=_DATE_FORMAT,
        stream=sys.stderr,
    )
    third_party_level = logging.DEBUG if verbose else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
