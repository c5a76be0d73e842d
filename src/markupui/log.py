"""Console logging for the markupui command line.

Library modules only create ``logging.getLogger(__name__)`` loggers; nothing
is printed until the CLI calls ``setup_logging``.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

DEBUG_ENV = "MARKUPUI_DEBUG"

# stdout carries compiled documents, so log records go to stderr.
console = Console(stderr=True)


def debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV, "").strip().lower() not in ("", "0", "false", "no")


def cli_log_level(verbose: bool = False) -> int:
    """WARNING by default, INFO with ``-v``, DEBUG when MARKUPUI_DEBUG is set."""
    if debug_enabled():
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False) -> None:
    """Send markupui records, plus watchdog's own warnings, to a rich handler.

    ``-v`` reports compiled files, watched paths and cache evictions. The
    observer internals of watchdog only show up in debug mode.
    """
    level = cli_log_level(verbose)
    debug = level == logging.DEBUG

    handler = RichHandler(
        console=console,
        show_time=verbose or debug,
        show_path=debug,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    levels = {
        "markupui": level,
        "watchdog": logging.DEBUG if debug else logging.WARNING,
    }
    for name, logger_level in levels.items():
        logger = logging.getLogger(name)
        logger.setLevel(logger_level)
        logger.handlers = [handler]
        logger.propagate = False
