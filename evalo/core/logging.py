import sys
from functools import lru_cache
from pathlib import Path

from loguru import logger

from evalo.core.config import get_settings

settings = get_settings()


@lru_cache
def get_logger(name: str):
    """
    Get a logger bound to the given module name

    Args:
        name: logger name, usually ``__name__``

    Returns:
        logger: loguru logger with ``name`` in its extra context
    """
    return logger.bind(name=name)


def setup_logging():
    """Configure the application's log sinks"""
    logger.remove()

    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
        colorize=True,
    )

    # File sink is optional; an empty LOG_FILE keeps logs on stdout only
    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.LOG_FILE,
            level=settings.LOG_LEVEL,
            format=settings.LOG_FORMAT,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression="zip",
        )

    logger.info(f"Logging initialised, level: {settings.LOG_LEVEL}")
