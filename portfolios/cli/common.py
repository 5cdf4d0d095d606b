"""Command-line plumbing shared by the ``portfolios`` entry points."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional

from portfolios.core.config_manager import ConfigManager, get_config_manager


LOG_LEVEL_NAMES = ("debug", "info", "warning", "error", "critical")


def add_common_cli_arguments(
    parser: argparse.ArgumentParser,
    config: Optional[Dict[str, str]] = None,
    *,
    manager: Optional[ConfigManager] = None,
    default_log_file: Optional[Path] = None,
    default_config: Optional[Path] = None,
) -> None:
    """Add the logging and config options.

    Defaults come from the ``log_level``, ``log_file`` and ``console_output``
    keys of ``config`` so the project config file can set them.
    """
    cm = manager or get_config_manager()
    config = config or {}

    level = cm.get_str(config, "log_level", default="info").strip().lower()
    log_file = cm.get_str(config, "log_file")

    group = parser.add_argument_group("logging")
    group.add_argument(
        "--log-level",
        type=str.lower,
        choices=LOG_LEVEL_NAMES,
        default=level if level in LOG_LEVEL_NAMES else "info",
        help="Logging verbosity",
    )
    group.add_argument(
        "--log-file",
        type=Path,
        default=Path(log_file) if log_file else default_log_file,
        help="Rotating log file (default: state directory)",
    )

    console = group.add_mutually_exclusive_group()
    console.add_argument(
        "--console",
        dest="console_output",
        action="store_true",
        default=cm.get_bool(config, "console_output", default=False),
        help="Also log to stdout",
    )
    console.add_argument(
        "--no-console",
        dest="console_output",
        action="store_false",
        help="Log to the file only",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=default_config,
        help="key = value file with focus/look/terminal/data settings",
    )


def _positive(cast: Callable[[str], float], label: str) -> Callable[[str], float]:
    def parse(text: str):
        try:
            value = cast(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"expected a positive {label}, got {text!r}") from None
        if value <= 0:
            raise argparse.ArgumentTypeError(f"expected a positive {label}, got {text!r}")
        return value

    parse.__name__ = f"positive_{label}"
    return parse


positive_int = _positive(int, "integer")
positive_float = _positive(float, "number")


def install_exception_handlers(
    logger: logging.Logger,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> None:
    """Send uncaught errors to ``logger``. Ctrl+C keeps the previous hook."""
    previous = sys.excepthook

    def excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            previous(exc_type, exc, tb)
            return
        logger.critical("Uncaught %s: %s", exc_type.__name__, exc, exc_info=(exc_type, exc, tb))

    sys.excepthook = excepthook

    if loop is None:
        return

    def loop_handler(loop, context):
        logger.error(
            "Event loop error: %s",
            context.get("message", "unhandled exception"),
            exc_info=context.get("exception"),
        )

    loop.set_exception_handler(loop_handler)
