"""Tests for logging configuration."""
import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from flashdeck.config import settings
from flashdeck.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def test_setup_logging_console_only(restore_root_logger, monkeypatch):
    """Test that only a console handler is installed without a log directory."""
    monkeypatch.setattr(settings.logging, "dir", None)

    setup_logging(level="warning")

    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0], logging.StreamHandler)


def test_setup_logging_with_file(restore_root_logger, monkeypatch, tmp_path):
    """Test that a rotating file handler is added when a log directory is set."""
    monkeypatch.setattr(settings.logging, "dir", str(tmp_path / "logs"))

    setup_logging("Starting tests", level=logging.DEBUG)

    file_handlers = [h for h in restore_root_logger.handlers if isinstance(h, TimedRotatingFileHandler)]
    assert len(file_handlers) == 1
    assert (tmp_path / "logs" / "flashdeck.log").exists()
