"""Tests for CLI logging setup."""

import logging

from rich.logging import RichHandler

from markupui.log import DEBUG_ENV, cli_log_level, setup_logging


def test_levels(monkeypatch):
    monkeypatch.delenv(DEBUG_ENV, raising=False)
    assert cli_log_level() == logging.WARNING
    assert cli_log_level(verbose=True) == logging.INFO

    monkeypatch.setenv(DEBUG_ENV, "1")
    assert cli_log_level() == logging.DEBUG

    monkeypatch.setenv(DEBUG_ENV, "0")
    assert cli_log_level() == logging.WARNING


def test_watchdog_stays_quiet_unless_debugging(monkeypatch):
    monkeypatch.delenv(DEBUG_ENV, raising=False)
    setup_logging(verbose=True)

    package = logging.getLogger("markupui")
    watchdog = logging.getLogger("watchdog")
    assert package.level == logging.INFO
    assert watchdog.level == logging.WARNING
    assert isinstance(package.handlers[0], RichHandler)
    assert package.handlers == watchdog.handlers
    assert not package.propagate


def test_debug_mode_opens_watchdog_logs(monkeypatch):
    monkeypatch.setenv(DEBUG_ENV, "yes")
    setup_logging()
    assert logging.getLogger("markupui").level == logging.DEBUG
    assert logging.getLogger("watchdog").level == logging.DEBUG
