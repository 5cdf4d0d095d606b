import logging

from portfolios.core.logging_utils import get_module_logger


def test_module_logger_namespace():
    logger = get_module_logger("FocusController")
    assert logger.name == "portfolios.FocusController"
    assert logger.component == "FocusController"


def test_dotted_name_uses_last_component():
    logger = get_module_logger("portfolios.data.loose_json")
    assert logger.component == "loose_json"


def test_messages_are_prefixed(caplog):
    logger = get_module_logger("Terminal")
    with caplog.at_level(logging.INFO, logger="portfolios"):
        logger.info("Executing command: %s", "help")
        logger.info("[Terminal] already prefixed")

    assert caplog.messages == [
        "[Terminal] Executing command: help",
        "[Terminal] already prefixed",
    ]


def test_bad_format_args_do_not_raise(caplog):
    logger = get_module_logger("Terminal")
    with caplog.at_level(logging.INFO, logger="portfolios"):
        logger.info("no placeholders", "extra")

    assert "args=extra" in caplog.messages[0]

