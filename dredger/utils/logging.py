"""Logging configuration for the dredger command line.

Every module logs through ``logging.getLogger(__name__)``, so all
records land under the ``dredger`` logger configured here. Console
output goes to stderr, leaving stdout for command results such as
``dredger tree --json``.
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "dredger"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Attach console and optional file handlers to the package logger.

    Safe to call once per CLI invocation: handlers from a previous call
    are replaced, not stacked. An unknown level name falls back to INFO.

    Args:
        level: Level name from the ``logging`` section of config.yaml.
        log_format: Record format shared by both handlers.
        log_file: Optional path that also receives every record.

    Returns:
        The ``dredger`` logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    package_logger.setLevel(numeric_level)
    package_logger.addHandler(
        _handler(logging.StreamHandler(sys.stderr), numeric_level, log_format)
    )
    if log_file:
        package_logger.addHandler(
            _handler(logging.FileHandler(log_file), numeric_level, log_format)
        )

    package_logger.debug(
        "Logging to stderr%s at %s",
        f" and {log_file}" if log_file else "",
        logging.getLevelName(numeric_level),
    )
    return package_logger
