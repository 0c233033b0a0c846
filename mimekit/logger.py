"""
Unified Logging Module
======================

Single place where mimekit loggers are configured and handed out.

Usage:
    from mimekit.logger import get_logger

    logger = get_logger(__name__)
    logger.debug("Charset fallback: %s", label)
"""

import logging
import sys
from typing import Optional

from mimekit.config import get_settings

# Default log format with timestamp, level, and module name
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "mimekit"

# Global flag to track if the package logger has been configured
_root_configured = False


def _configure_root_logger() -> None:
    """
    Set up the package logger.

    By default records propagate to the host application's handlers and the
    package logger only gets a NullHandler. With MIMEKIT_LOG_PROPAGATE=false
    a stdout console handler is attached instead and propagation is off.

    Runs once; the _root_configured flag guards against duplicate handlers.
    """
    global _root_configured
    if _root_configured:
        return

    settings = get_settings()
    root_logger = logging.getLogger(PACKAGE_LOGGER)
    root_logger.setLevel(logging.getLevelName(settings.LOG_LEVEL))

    if settings.LOG_PROPAGATE:
        root_logger.addHandler(logging.NullHandler())
        root_logger.propagate = True
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))
        root_logger.addHandler(console_handler)
        root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return the logger for ``name``, configuring the package logger first.

    Args:
        name: logger name, normally the calling module's ``__name__``
        level: optional level for this logger only

    Example:
        logger = get_logger(__name__)
        logger.debug("Loaded %d charset aliases", len(aliases))
    """
    _configure_root_logger()

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: int, logger_name: Optional[str] = None) -> None:
    """
    Set the level of one logger, or of the whole package when no name is given.

    Example:
        set_level(logging.DEBUG)                        # every mimekit module
        set_level(logging.DEBUG, "mimekit.mime.charset")  # charset layer only
    """
    logging.getLogger(logger_name or PACKAGE_LOGGER).setLevel(level)
