import logging

from pythonjsonlogger import jsonlogger

from slotbook.base import logging_config
from slotbook.base.logging_config import setup_logger


def test_json_logs_follow_settings(monkeypatch):
    monkeypatch.setattr(logging_config.settings, "ENABLE_JSON_LOGS", True)

    logger = setup_logger("slotbook.tests.json")

    assert isinstance(logger.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_plain_logs_and_level_follow_settings(monkeypatch):
    monkeypatch.setattr(logging_config.settings, "ENABLE_JSON_LOGS", False)
    monkeypatch.setattr(logging_config.settings, "LOG_LEVEL", "warning")

    logger = setup_logger("slotbook.tests.plain")

    assert not isinstance(logger.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert logger.level == logging.WARNING


def test_file_handler_only_when_enabled(monkeypatch, tmp_path):
    monkeypatch.setattr(logging_config.settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(logging_config.settings, "ENABLE_FILE_LOGGING", False)
    assert len(setup_logger("slotbook.tests.nofile", log_file="x.log").handlers) == 1

    monkeypatch.setattr(logging_config.settings, "ENABLE_FILE_LOGGING", True)
    logger = setup_logger("slotbook.tests.file", log_file="x.log")

    assert len(logger.handlers) == 2
    assert (tmp_path / "x.log").exists()
    for handler in logger.handlers:
        handler.close()
