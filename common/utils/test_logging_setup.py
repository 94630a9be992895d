"""
Tests for logging configuration.
"""
import logging

from common.utils.logging_setup import setup_logging


def test_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "router.log"

    logger = setup_logging(app_name="router-test", log_level="DEBUG",
                           log_file=str(log_file), log_to_console=False)
    logging.getLogger("router-test.dns").info("resolver updated")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert "router-test.dns - INFO - resolver updated" in log_file.read_text()


def test_repeated_setup_replaces_handlers(tmp_path):
    setup_logging(app_name="router-test2", log_to_console=True)
    logger = setup_logging(app_name="router-test2", log_to_console=True)

    assert len(logger.handlers) == 1


def test_unknown_level_defaults_to_info():
    logger = setup_logging(app_name="router-test3", log_level="chatty", log_to_console=False)

    assert logger.level == logging.INFO
    assert logger.handlers == []
