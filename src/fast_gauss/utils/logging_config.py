"""
Logging configuration for Fast Gauss.

All package modules obtain their logger through get_logger(__name__) so that
every record lives under the "fast_gauss" namespace and can be configured
in one place.

Usage:
    from fast_gauss.utils.logging_config import get_logger, setup_logging

    setup_logging("DEBUG")
    logger = get_logger(__name__)
"""

import logging
from typing import Optional, Union

from ..config import config

ROOT_LOGGER_NAME = "fast_gauss"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library default: stay silent unless the application configures logging
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class PackageStreamHandler(logging.StreamHandler):
    """Stream handler installed by setup_logging()."""


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger in the fast_gauss namespace.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Logger whose name starts with "fast_gauss"
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: Optional[Union[int, str]] = None, fmt: Optional[str] = None
) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling this more than once replaces the previously installed handler
    instead of stacking a second one.

    Args:
        level: Logging level name or number (default: FAST_GAUSS_LOG_LEVEL)
        fmt: Format string for records (default: DEFAULT_FORMAT)

    Returns:
        The configured package logger
    """
    if level is None:
        level = config.logging.level
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        if isinstance(handler, PackageStreamHandler):
            root.removeHandler(handler)

    handler = PackageStreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    root.addHandler(handler)
    return root
