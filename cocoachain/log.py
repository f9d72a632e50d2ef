"""
Logging setup for the CocoaChain service.
"""

import logging
import sys

LOGGER_NAME = "cocoachain"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Install a single stream handler on the package logger.

    Safe to call more than once; the handler is only added the first time.
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Child logger under the package namespace, e.g. get_logger("api")."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
