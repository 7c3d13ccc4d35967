"""
Centralized logging configuration for the ASCII editor.
"""

import logging
import sys
from typing import Optional

_initialized = False


def setup_logging(level: int = logging.INFO, stream=None) -> None:
    """Attach a console handler to the package logger (idempotent)."""
    global _initialized
    if _initialized:
        return

    logger = logging.getLogger("ascii_editor")
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)

    _initialized = True
    logger.debug("Logging system initialized")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "ascii_editor")
