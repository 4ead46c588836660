"""Logging configuration for tech-detector.

Scan results are written to stdout, so every log record goes to stderr.
"""

import logging
import sys

LOGGER_NAME = "tech_detector"
LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Calling it again only changes the level of the existing handler.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)

    Returns:
        The "tech_detector" logger
    """
    numeric_level = getattr(logging, level.upper())
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(numeric_level)

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        package_logger.addHandler(handler)

    for handler in package_logger.handlers:
        handler.setLevel(numeric_level)

    return package_logger


logger = setup_logging("WARNING")
