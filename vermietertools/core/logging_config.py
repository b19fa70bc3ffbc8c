# vermietertools/core/logging_config.py
"""
Logging for the Vermietertools API.

One root configuration shared by the API, `python -m vermietertools` and
scripts/create_user.py. Passwords, hashes and full session tokens are never
passed to a logger; call sites log at most an 8-character token prefix.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "vermietertools.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Driver and server loggers that drown the auth log at INFO
QUIET_LOGGERS = (
    "uvicorn.access",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "httpx",
    "httpcore",
)


def _has_console_handler(root: logging.Logger) -> bool:
    # RotatingFileHandler is a StreamHandler subclass, so compare exact types
    return any(type(h) is logging.StreamHandler for h in root.handlers)


def _has_file_handler(root: logging.Logger, log_file: Path) -> bool:
    return any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == str(log_file)
        for h in root.handlers
    )


def setup_logging():
    """
    Configure the root logger. Safe to call repeatedly: create_app() runs it
    for every app instance, and no handler is attached twice.

    Environment:
        LOG_LEVEL: root level (default INFO)
        LOG_DIR: directory of the rotating log file (default ./logs)
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_file = (Path(os.getenv("LOG_DIR", "logs")) / LOG_FILE_NAME).resolve()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    if not _has_console_handler(root_logger):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # 5 MB per file, 5 backups
    if not _has_file_handler(root_logger, log_file):
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
