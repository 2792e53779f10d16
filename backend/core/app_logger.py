"""
app_logger.py — Shared logging setup for the report engine.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "reportcard"


def _level_from_env() -> int:
    raw = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, raw, logging.INFO)


def setup_logging() -> logging.Logger:
    """Configure the application logger once; safe to call repeatedly."""
    level = _level_from_env()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate console handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the app logger or one of its children (e.g. ``get_logger("ranking")``)."""
    base = logging.getLogger(ROOT_LOGGER_NAME)
    return base.getChild(name) if name else base
