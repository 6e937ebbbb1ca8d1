from __future__ import annotations

import logging

import pytest

from rentops.utils.config import get_settings
from rentops.utils.logger import ROOT_LOGGER_NAME, configure_logging, get_logger


@pytest.fixture
def restore_log_level():
    yield
    get_settings.cache_clear()
    configure_logging(force=True)


def test_module_loggers_live_under_the_project_tree() -> None:
    assert get_logger("app").name == "rentops.app"
    assert get_logger("rentops.domain.clock_time").name == "rentops.domain.clock_time"
    assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME


def test_handler_is_attached_once() -> None:
    configure_logging()
    configure_logging()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    assert len(root.handlers) == 1
    assert root.propagate is False


def test_log_level_env_override_is_honoured_on_force(monkeypatch, restore_log_level) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    get_settings.cache_clear()

    configure_logging(force=True)

    assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG
    assert get_logger("services.timeline").isEnabledFor(logging.DEBUG)


def test_explicit_level_wins_over_settings(restore_log_level) -> None:
    configure_logging("warning", force=True)

    assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING
    assert not get_logger("services.timeline").isEnabledFor(logging.INFO)
