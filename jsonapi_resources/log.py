"""Logging setup for the package."""

import logging
import sys

from jsonapi_resources.config import get_settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"


def init_logging(loglevel: int | str | None = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.
    The handler is only installed once: a logger with an explicit level is left alone.
    """
    log = logging.getLogger("jsonapi_resources")
    if log.level == logging.NOTSET:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.setLevel(loglevel if loglevel is not None else get_settings().log_level.upper())
        log.addHandler(handler)
    return log
