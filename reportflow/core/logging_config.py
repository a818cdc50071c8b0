"""
Logging for the API process and the sweeper.

Everything goes to the console and to a rotating reportflow.log. Validation
state events (clears, sweeps, attempt-count warnings, cache expiry) are also
written to validation_state.log, so a session's lifecycle can be followed
without the request noise.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "reportflow.log"
STATE_LOG_FILE_NAME = "validation_state.log"
# Parent of the store and cache module loggers
STATE_LOGGER_NAME = "reportflow.core.state"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5

LOGGER_LEVELS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
}


def _attach_rotating_file(logger: logging.Logger, path: Path, formatter: logging.Formatter) -> None:
    """Add a rotating file handler for path unless logger already has one"""
    filename = str(path.resolve())
    if any(isinstance(h, RotatingFileHandler) and h.baseFilename == filename for h in logger.handlers):
        return

    handler = RotatingFileHandler(
        filename=filename,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure console, main file and state audit file; safe to call repeatedly.

    Args:
        level: Root level; defaults to LOG_LEVEL (INFO)
        log_dir: Directory for log files; defaults to LOG_DIR (logs)

    Returns:
        The root logger
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    directory.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Exact type check: pytest's capture handlers subclass StreamHandler
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _attach_rotating_file(root_logger, directory / LOG_FILE_NAME, formatter)

    # State records also propagate to the root handlers
    _attach_rotating_file(logging.getLogger(STATE_LOGGER_NAME), directory / STATE_LOG_FILE_NAME, formatter)

    for name, logger_level in LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(logger_level)

    root_logger.debug(f"Logging to {directory.resolve()} at {level}")
    return root_logger
