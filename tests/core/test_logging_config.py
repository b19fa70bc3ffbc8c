# tests/core/test_logging_config.py

import logging
from logging.handlers import RotatingFileHandler

import pytest

from vermietertools.core.logging_config import LOG_FILE_NAME, setup_logging


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    root = logging.getLogger()
    handlers_before = list(root.handlers)
    yield tmp_path / "logs"
    for handler in root.handlers[:]:
        if handler not in handlers_before:
            root.removeHandler(handler)
            handler.close()


def test_setup_logging_is_idempotent(log_dir):
    root = setup_logging()
    setup_logging()

    log_file = str((log_dir / LOG_FILE_NAME).resolve())
    file_handlers = [
        h for h in root.handlers
        if isinstance(h, RotatingFileHandler) and h.baseFilename == log_file
    ]
    console_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]

    assert len(file_handlers) == 1
    assert len(console_handlers) == 1
    assert log_dir.is_dir()


def test_driver_loggers_are_quiet(log_dir):
    setup_logging()
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("aiosqlite").level == logging.WARNING
