"""
Loggers for the sigma_protocol package

Every module takes a logger from get_logger(__name__). Loggers write to stdout, and optionally to a file,
at DEBUG unless told otherwise. The CLI narrows all of them at once with set_log_level.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

__all__ = ["get_logger", "set_log_level", "LOG_FORMAT"]

PACKAGE_LOGGER = "sigma_protocol"
LOG_FORMAT = '%(asctime)s [%(name)s] [%(levelname)s]: %(message)s'


def _level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def get_logger(name: str, log_level: str = "DEBUG", log_file: Optional[Path] = None,
               format_string: str = LOG_FORMAT) -> logging.Logger:
    """
    Returns the named logger, attaching its handlers on first use only.

    Args:
        name: Logger name, normally the calling module's __name__
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: Also append records to this file, creating its directory if needed
        format_string: Record format shared by all handlers
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(_level(log_level))
    formatter = logging.Formatter(format_string)

    handlers = [logging.StreamHandler(stream=sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def set_log_level(log_level: str) -> None:
    """
    Apply the given level to every logger created under the sigma_protocol package
    """
    level = _level(log_level)
    for name, logger in logging.root.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith(PACKAGE_LOGGER):
            logger.setLevel(level)
