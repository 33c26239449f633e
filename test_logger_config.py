"""Tests for component logger setup."""

import logging
import os

import logger_config


def test_setup_logger_writes_component_file():
    logger = logger_config.setup_logger("health.tests.component", "tests_component.log")
    logger.info("component started")
    for handler in logger.handlers:
        handler.flush()

    path = os.path.join(logger_config.LOG_DIR, "tests_component.log")
    with open(path, encoding="utf-8") as f:
        assert "health.tests.component - component started" in f.read()


def test_setup_logger_does_not_duplicate_handlers():
    first = logger_config.setup_logger("health.tests.repeat", "tests_repeat.log")
    count = len(first.handlers)

    second = logger_config.setup_logger("health.tests.repeat", "tests_repeat.log")

    assert second is first
    assert len(second.handlers) == count


def test_library_loggers_are_quieted():
    for name in ("sqlalchemy", "apscheduler", "httpx"):
        assert logging.getLogger(name).level == logging.WARNING
