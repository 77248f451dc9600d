"""
Tests for rate_engine/utils/logging.py.

What we test
------------
_TextFormatter / _JsonFormatter:
  - Rate-cell extras are appended (text) or grouped under ``cell`` (json).
  - Records without cell extras are left untouched.

configure_logging():
  - Writes to the configured log file, creating parent directories.
"""

from __future__ import annotations

import json
import logging

import pytest

from rate_engine.config import LoggingConfig
from rate_engine.utils.logging import _JsonFormatter, _TextFormatter, configure_logging


def _record(msg: str = "No competitor data", **extra) -> logging.LogRecord:
    record = logging.makeLogRecord(
        {"name": "rate_engine.test", "levelno": logging.WARNING, "levelname": "WARNING", "msg": msg}
    )
    for key, val in extra.items():
        setattr(record, key, val)
    return record


CELL = {
    "rate_id": "r-1",
    "property_id": "prop-1",
    "room_type_code": "DLX",
    "stay_date": "2025-06-14",
}


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestTextFormatter:
    def test_cell_appended(self):
        line = _TextFormatter().format(_record(**CELL))
        assert line.endswith("No competitor data {DLX 2025-06-14 rate_id=r-1}")
        assert "[WARNING] rate_engine.test:" in line

    def test_plain_record(self):
        line = _TextFormatter().format(_record())
        assert line.endswith("No competitor data")
        assert "{" not in line


class TestJsonFormatter:
    def test_cell_grouped(self):
        payload = json.loads(_JsonFormatter().format(_record(batch="b-7", **CELL)))
        assert payload["level"] == "WARNING"
        assert payload["msg"] == "No competitor data"
        assert payload["cell"] == CELL
        assert payload["batch"] == "b-7"
        assert "rate_id" not in payload

    def test_no_cell_key_without_extras(self):
        payload = json.loads(_JsonFormatter().format(_record()))
        assert "cell" not in payload
        assert set(payload) == {"ts", "level", "logger", "msg"}


class TestConfigureLogging:
    def test_log_file_written(self, tmp_path, restore_root_logging):
        log_file = tmp_path / "logs" / "engine.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file)))
        logging.getLogger("rate_engine.test").info("batch started")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "batch started" in log_file.read_text(encoding="utf-8")
