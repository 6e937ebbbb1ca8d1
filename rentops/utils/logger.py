"""Logging setup shared by the API, the timeline engine and the scripts."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from rentops.utils.config import get_settings


ROOT_LOGGER_NAME = "rentops"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None, force: bool = False) -> logging.Logger:
    """Attach one stdout handler to the `rentops` logger tree.

    The level comes from `level`, else from `LOG_LEVEL` in settings. Later calls
    are no-ops unless `force` is set, which re-reads the level (tests use this
    after changing the environment).
    """
    global _handler

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None and not force:
        return root

    resolved_level = (level or get_settings().log_level).upper()
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)
        root.propagate = False
    root.setLevel(resolved_level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for `name`, placed under the `rentops` tree when it is not already."""
    configure_logging()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
