"""Colored console logging for the obz_results package.

A single colorlog stream handler sits on the `obz_results` package logger.
Module loggers are its children and propagate to it, so records also reach
any handler the host application installs on the root logger.
"""

import logging

import colorlog

PACKAGE_LOGGER = "obz_results"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

_handler = logging.StreamHandler()
_handler.setFormatter(
    colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        log_colors=LOG_COLORS,
    )
)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler not in logger.handlers:
        logger.addHandler(_handler)
        if logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module of this package."""
    _package_logger()
    return logging.getLogger(name)


def set_level(level: int | str) -> None:
    """Set the level inherited by every obz_results logger."""
    _package_logger().setLevel(level)
