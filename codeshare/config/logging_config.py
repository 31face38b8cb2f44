"""
Logging Configuration

Installs a console handler on the package logger. Library code only ever
calls logging.getLogger(__name__); handlers are attached by entry points.
"""

import logging
import sys
from typing import Optional, TextIO, Union

LOGGER_NAME = "codeshare"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[int, str] = logging.WARNING, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure the package logger.

    Existing handlers are replaced so repeated calls do not duplicate output.

    Args:
        level: Logging level name or number
        stream: Output stream, stderr by default

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
