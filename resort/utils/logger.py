"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from resort.utils.config import get_settings


_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    Every module goes through `get_logger`, so the format and level are
    decided here and nowhere else.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format=settings.log_format,
        stream=sys.stdout,
    )
    # httpx logs every TestClient call at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
