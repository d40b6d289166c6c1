"""Logging configuration for the application."""

from __future__ import annotations

import logging
import sys

_NOISY_LOGGERS = ("httpcore", "httpx", "multipart")


def setup_logging(level: str = "INFO") -> None:
    """Attach a single console handler to the root logger."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Re-running (e.g. on reload) must not stack handlers
    if any(getattr(h, "_eventx", False) for h in root_logger.handlers):
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    console_handler._eventx = True
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
