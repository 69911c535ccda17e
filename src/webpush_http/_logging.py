"""
Package logger helpers.

All loggers live under the ``webpush_http`` namespace so applications can
enable them with a single ``logging.getLogger("webpush_http")`` call.
"""

import logging

__all__ = ["get_logger"]

_ROOT_LOGGER_NAME = "webpush_http"

logging.getLogger(_ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger in the ``webpush_http`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if name != _ROOT_LOGGER_NAME and not name.startswith(_ROOT_LOGGER_NAME + "."):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
