from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Labeled console logging for learner_report.

Every line is ``LABEL message`` on stdout, LABEL being one of DEBUG, INFO,
WARN, ERROR or SUMMARY. Package modules log through
``logging.getLogger(__name__)``; their records propagate to the single
"learner_report" logger configured here, which does not propagate further.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "get_logger",
    "log_summary",
    "reset_logging",
    "set_debug",
    "setup_logging",
]

LOGGER_NAME = "learner_report"

# INFO(20) と WARNING(30) の間
SUMMARY_LEVEL = 25
logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message``; WARNING is shortened to WARN."""

    _RENAMED = {"WARNING": "WARN"}

    def format(self, record: logging.LogRecord) -> str:
        label = self._RENAMED.get(record.levelname, record.levelname)
        return f"{label} {record.getMessage()}"


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Attach one labeled stdout handler to the application logger.

    Calling it again returns the already configured logger unchanged; use
    reset_logging() first to rebind the handler (tests swap sys.stdout).
    """
    global _configured
    if _configured is not None:
        return _configured

    app_logger = logging.getLogger(LOGGER_NAME)
    for old in list(app_logger.handlers):
        app_logger.removeHandler(old)

    console = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console.setFormatter(LabeledFormatter())
    app_logger.addHandler(console)
    app_logger.propagate = False

    _configured = app_logger
    _apply_level(app_logger, level)
    return app_logger


def _apply_level(app_logger: logging.Logger, level: int) -> None:
    app_logger.setLevel(level)
    for h in app_logger.handlers:
        h.setLevel(level)


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def set_debug(enabled: bool = True) -> None:
    """--debug: DEBUG records become visible (INFO again when disabled)."""
    _apply_level(get_logger(), logging.DEBUG if enabled else logging.INFO)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup_logging() starts fresh."""
    global _configured
    _configured = None
