"""Logging setup for the diff comment action."""

import logging
import os
import sys

LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
}

DEFAULT_FORMAT = '[%(levelname)s] %(name)s: %(message)s'


def _resolve_level(level: str) -> int:
    """Map a level name to a logging constant, falling back to INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a logger that writes to stderr.

    stdout is reserved for the JSON result printed by ``main()``, so the
    handler is attached to stderr. The level comes from LOG_LEVEL.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(_resolve_level(os.environ.get('LOG_LEVEL', 'INFO')))
    return logger
