import logging

import pytest

from fangirl.error_handling import LOGGER_NAME, setup_logging


@pytest.fixture
def clean_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = logger.handlers[:], logger.level
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:], logger.level = saved


def test_console_only(clean_logger):
    logger = setup_logging("debug")

    assert logger is clean_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_file_handler(clean_logger, tmp_path):
    logger = setup_logging("INFO", log_dir=tmp_path / "logs")
    logging.getLogger("fangirl.retry").warning("retrying soon")

    (log_file,) = (tmp_path / "logs").glob("fangirl_*.log")
    assert "retrying soon" in log_file.read_text(encoding="utf-8")
    assert len(logger.handlers) == 2


def test_no_duplicate_handlers(clean_logger):
    setup_logging()
    setup_logging()
    assert len(clean_logger.handlers) == 1


def test_unknown_level_defaults_to_info(clean_logger):
    assert setup_logging("chatty").level == logging.INFO
