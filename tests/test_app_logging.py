"""Tests for logging configuration."""

import logging

from nightswipe.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("nightswipe")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_configure_logging_accepts_level_names() -> None:
    logger = logging.getLogger("nightswipe")

    configure_logging("debug")

    assert logger.level == logging.DEBUG
    configure_logging(logging.INFO)
    assert logger.level == logging.INFO
