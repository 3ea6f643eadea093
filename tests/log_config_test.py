"""Tests for logging setup."""

from __future__ import annotations

import logging
import sys
from unittest.mock import patch

import pytest

from silvertracker import log_config


@pytest.fixture
def restore_levels():
    names = ("yfinance", "urllib3", "peewee")
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestSetup:
    def test_info_by_default(self, restore_levels):
        with patch("silvertracker.log_config.logging.basicConfig") as basic:
            log_config.setup()
        assert basic.call_args.kwargs["level"] == logging.INFO
        assert "%(name)s" in basic.call_args.kwargs["format"]

    def test_writes_to_stderr(self, restore_levels):
        with patch("silvertracker.log_config.logging.basicConfig") as basic:
            log_config.setup()
        assert basic.call_args.kwargs["stream"] is sys.stderr

    def test_verbose_enables_debug(self, restore_levels):
        with patch("silvertracker.log_config.logging.basicConfig") as basic:
            log_config.setup(verbose=True)
        assert basic.call_args.kwargs["level"] == logging.DEBUG
        assert logging.getLogger("yfinance").level == logging.DEBUG

    def test_quiets_yahoo_dependencies(self, restore_levels):
        with patch("silvertracker.log_config.logging.basicConfig"):
            log_config.setup()
        assert logging.getLogger("yfinance").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
