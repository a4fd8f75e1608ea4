from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for conversion runs.

Every line is ``LABEL message`` (INFO|WARN|ERROR|SUMMARY, plus DEBUG with
--debug) on one stream, so validation lines, mapping warnings and the final
SUMMARY line read in order. Module loggers created with
``logging.getLogger(__name__)`` inside the package propagate here.

Python warnings (openpyxl style/header warnings on odd workbooks) are routed
through the same handler instead of going to stderr unlabeled.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "enable_debug",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "delivery_converter"
SUMMARY_LEVEL = 25  # INFO と WARNING の間

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message`` formatter; WARNING is shortened to WARN."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        message = record.getMessage()
        if record.name == "py.warnings":
            # "path:line: UserWarning: text\n  warn(...)" -> 先頭行のみ
            message = message.strip().splitlines()[0]
        return f"{label} {message}"


def _labeled_handler(stream: TextIO, level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    return handler


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Configure the application logger once and return it.

    ``stream`` defaults to the current ``sys.stdout``. Later calls return the
    already configured logger unchanged until ``reset_logging()``.
    """
    global _logger
    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = _labeled_handler(stream or sys.stdout, level)

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(level)
    for old in logger.handlers[:]:
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.propagate = False

    logging.captureWarnings(True)
    warnings_logger = logging.getLogger("py.warnings")
    for old in warnings_logger.handlers[:]:
        warnings_logger.removeHandler(old)
    warnings_logger.addHandler(handler)
    warnings_logger.propagate = False

    _logger = logger
    return logger


def enable_debug(logger: logging.Logger | None = None) -> logging.Logger:
    """Lower the logger and all of its handlers to DEBUG."""
    logger = logger or get_logger()
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)
    return logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Emit ``message`` at SUMMARY level (rendered as ``SUMMARY message``)."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup_logging() starts over (tests)."""
    global _logger
    _logger = None
    logging.captureWarnings(False)
