"""
Logging configuration for searchy.

Everything goes to stderr; stdout carries only results and page content.
"""
import logging
import sys

LOGGER_NAME = "searchy"


class StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever sys.stderr is at write time."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass  # writes always go to the current sys.stderr


def setup_logger(name: str = LOGGER_NAME, level: int = logging.WARNING) -> logging.Logger:
    """
    Set up and configure a logger for the application.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    console_handler = StderrHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def level_for_verbosity(verbosity: int, default: int = logging.WARNING) -> int:
    """Map a count of -v flags onto a logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return default
