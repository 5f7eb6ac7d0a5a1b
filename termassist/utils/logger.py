"""Logging setup for termassist using loguru."""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

CACHE_MODULE = "termassist.utils.cache"


def _make_filter(cache_debug: bool):
    """Hide per-lookup cache records unless cache debugging is on."""
    def _filter(record) -> bool:
        if cache_debug:
            return True
        return not (record["name"] == CACHE_MODULE and record["level"].no < 20)
    return _filter


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    format_string: Optional[str] = None,
    cache_debug: bool = False,
) -> None:
    """
    Configure loguru sinks for the assistant.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path. If None, logs only to stderr.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days")
        format_string: Custom format string. If None, uses DEFAULT_FORMAT.
        cache_debug: Keep DEBUG records of every cache hit/miss/eviction.
            They are very chatty, so they are dropped by default even at
            DEBUG level.
    """
    logger.remove()

    format_string = format_string or DEFAULT_FORMAT
    record_filter = _make_filter(cache_debug)

    logger.add(
        sys.stderr,
        format=format_string,
        level=log_level,
        filter=record_filter,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=log_level,
            filter=record_filter,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )


def get_logger(name: Optional[str] = None):
    """
    Get logger instance.

    Args:
        name: Optional component name bound into every record.

    Returns:
        Logger instance.
    """
    if name:
        return logger.bind(name=name)
    return logger
