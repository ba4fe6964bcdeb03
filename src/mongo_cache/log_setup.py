"""
Mongo Cache - Logging Setup

The library only creates module loggers; applications that want console
output can call configure_logging() once at startup.
"""

import logging

from .config import get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging with the standard format.

    Args:
        level: Log level; defaults to the configured LOG_LEVEL
    """
    if level is None:
        level = get_config().log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("mongo_cache").setLevel(level)
