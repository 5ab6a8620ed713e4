"""
Common logging configuration for the GEDCOM import/export package
"""

import logging
import sys


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
PACKAGE_PREFIX = 'vamsa_gedcom'


def setup_logger(name: str, level: str = "INFO") -> logging.Logger:
    """
    Setup a logger with consistent formatting across the package

    Args:
        name: Logger name (typically __name__)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance writing to stdout
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper()))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    return logger


def get_project_logger(module_name: str, verbose: bool = False) -> logging.Logger:
    """
    Get a logger configured for the package

    Args:
        module_name: Name of the module (typically __name__)
        verbose: Enable debug level logging
    """
    return setup_logger(module_name, "DEBUG" if verbose else "INFO")


def set_package_level(level: str) -> None:
    """Change the level of every logger already created under the package"""
    numeric = getattr(logging, level.upper())
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith(PACKAGE_PREFIX) and isinstance(logger, logging.Logger):
            logger.setLevel(numeric)
