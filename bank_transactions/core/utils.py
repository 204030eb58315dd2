"""Shared utility functions for the bank transactions importer."""

import logging
from datetime import UTC, datetime
from pathlib import Path

import colorlog

ROOT_LOGGER_NAME = "bank-transactions"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a project logger; the colorized console handler lives on the project root logger."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s" + LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    root.propagate = False
    return logging.getLogger(name)


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def utcnow_iso() -> str:
    """Get the current UTC time as an ISO8601 string."""
    return datetime.now(UTC).isoformat()


def safe_error_message(exc: BaseException, max_length: int) -> str:
    """Describe an exception in at most ``max_length`` characters.

    Falls back to the exception class name when the exception carries no message text.
    """
    msg = str(exc)
    if not msg or not msg.strip():
        msg = type(exc).__name__
    return msg[:max_length]
