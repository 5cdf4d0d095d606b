import argparse
import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from portfolios.cli.common import (
    add_common_cli_arguments,
    install_exception_handlers,
    positive_float,
    positive_int,
)


def _parser(config=None, **kwargs):
    parser = argparse.ArgumentParser()
    add_common_cli_arguments(parser, config, **kwargs)
    return parser


class TestCommonArguments:

    def test_defaults_without_config(self):
        args = _parser(default_config=Path("config.txt"), default_log_file=Path("x.log")).parse_args([])
        assert args.log_level == "info"
        assert args.log_file == Path("x.log")
        assert args.config == Path("config.txt")
        assert args.console_output is False

    def test_defaults_from_config(self):
        config = {"log_level": "DEBUG", "console_output": "true", "log_file": "/tmp/p.log"}
        args = _parser(config).parse_args([])
        assert args.log_level == "debug"
        assert args.console_output is True
        assert args.log_file == Path("/tmp/p.log")

    def test_unknown_config_level_falls_back(self):
        assert _parser({"log_level": "loud"}).parse_args([]).log_level == "info"

    def test_level_is_case_insensitive(self):
        assert _parser().parse_args(["--log-level", "WARNING"]).log_level == "warning"

    def test_console_flags_exclusive(self):
        parser = _parser()
        assert parser.parse_args(["--console"]).console_output is True
        with pytest.raises(SystemExit):
            parser.parse_args(["--console", "--no-console"])


class TestPositiveNumbers:

    def test_valid(self):
        assert positive_int("3") == 3
        assert positive_float("0.5") == 0.5

    @pytest.mark.parametrize("value", ["0", "-1", "abc"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int(value)


def test_install_exception_handlers(monkeypatch):
    logger = MagicMock(spec=logging.Logger)
    loop = MagicMock()
    monkeypatch.setattr(sys, "excepthook", MagicMock())

    install_exception_handlers(logger, loop)

    sys.excepthook(ValueError, ValueError("boom"), None)
    logger.critical.assert_called_once()

    handler = loop.set_exception_handler.call_args.args[0]
    handler(loop, {"message": "task died", "exception": RuntimeError("x")})
    logger.error.assert_called_once()


def test_keyboard_interrupt_uses_previous_hook(monkeypatch):
    previous = MagicMock()
    monkeypatch.setattr(sys, "excepthook", previous)
    logger = MagicMock(spec=logging.Logger)

    install_exception_handlers(logger)
    sys.excepthook(KeyboardInterrupt, KeyboardInterrupt(), None)

    previous.assert_called_once()
    logger.critical.assert_not_called()
