"""Logging configuration."""

import logging
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "ama_mitigator"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name or ROOT_LOGGER)

    # Only configure if no handlers exist
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


def configure_logging(
    level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None
) -> None:
    """Set the level of every package logger and optionally tee them to a file."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    manager = logging.Logger.manager
    package = logging.getLogger(ROOT_LOGGER)
    package.setLevel(level)
    for name, logger in list(manager.loggerDict.items()):
        if name.startswith(f"{ROOT_LOGGER}.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)

    # Module loggers propagate here, so the file handler lives only on the package logger
    for handler in list(package.handlers):
        if isinstance(handler, logging.FileHandler):
            package.removeHandler(handler)
            handler.close()

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package.addHandler(file_handler)
