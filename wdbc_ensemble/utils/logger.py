"""Logging configuration for the ensemble pipeline."""

import logging
import os
import sys

PACKAGE_LOGGER = "wdbc_ensemble"
LOG_LEVEL_ENV = "WDBC_LOG_LEVEL"


def _default_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Create a logger writing to stdout, once per name.

    The level defaults to ``$WDBC_LOG_LEVEL`` (INFO when unset).
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        level = _default_level() if level is None else level
        logger.setLevel(level)
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        fmt = logging.Formatter(
            "[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def set_verbosity(level: int) -> None:
    """Apply ``level`` to every logger already created under the package."""
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (
            name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")
        ):
            logger.setLevel(level)
