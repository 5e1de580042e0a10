"""
dnam_age.utils.logging

Logging helpers shared by every stage of the analysis.
A single named logger is configured once so repeated imports never duplicate handlers.
"""

import logging
import sys

LOGGER_NAME = "dnam_age"


def setup_logger(name: str = LOGGER_NAME, log_level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger if it has no handlers yet.

    Args:
        name (str): Name of the logger.
        log_level (str): Log level name (DEBUG, INFO, WARNING, ...).

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level.upper())

    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

        ch = logging.StreamHandler(sys.stdout)
        ch.setFormatter(formatter)
        logger.addHandler(ch)

        logger.propagate = False

    return logger


def set_log_level(log_level: str) -> None:
    """Change the level of the package logger after it has been created."""
    _logger.setLevel(log_level.upper())


_logger = setup_logger()


def log(msg: str, level: str = "INFO") -> None:
    """
    Log a message using the package logger.

    Args:
        msg (str): The log message.
        level (str, optional): DEBUG, INFO, WARNING, ERROR or CRITICAL. Default is 'INFO'.
    """
    log_func = getattr(_logger, level.lower(), _logger.info)
    log_func(msg)
