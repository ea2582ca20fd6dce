"""Tests for logger.py: setup_logging() and JsonFormatter.

Strategy: mock logging.basicConfig to inspect what setup_logging passes,
since pytest's log capture plugin interferes with real basicConfig calls.
"""

import json
import logging
import sys
from unittest.mock import patch

from mumble_sync.logger import JsonFormatter, setup_logging


class TestSetupLogging:
    @patch("mumble_sync.logger.logging.basicConfig")
    def test_logs_to_stderr(self, mock_basic):
        setup_logging()

        handlers = mock_basic.call_args[1]["handlers"]
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].stream is sys.stderr

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_default_level_is_info(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()
        assert mock_basic.call_args[1]["level"] == logging.INFO

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_env_log_level_honored(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging()
        assert mock_basic.call_args[1]["level"] == logging.ERROR

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_debug_beats_env(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(debug=True)
        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_level_argument_used_without_env(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(level="warning")
        assert mock_basic.call_args[1]["level"] == logging.WARNING

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_env_beats_level_argument(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(level="WARNING")
        assert mock_basic.call_args[1]["level"] == logging.ERROR

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_log_file_adds_file_handler(self, mock_basic, tmp_path):
        setup_logging(log_file=str(tmp_path / "sync.log"))

        handlers = mock_basic.call_args[1]["handlers"]
        file_handlers = [
            h for h in handlers if isinstance(h, logging.FileHandler)
        ]
        assert len(handlers) == 2
        assert len(file_handlers) == 1
        for h in file_handlers:
            h.close()

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_json_format(self, mock_basic):
        setup_logging(log_format="json")

        handlers = mock_basic.call_args[1]["handlers"]
        assert all(isinstance(h.formatter, JsonFormatter) for h in handlers)

    @patch("mumble_sync.logger.logging.basicConfig")
    def test_urllib3_silenced(self, _mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()
        assert logging.getLogger("urllib3").level == logging.WARNING


class TestJsonFormatter:
    def test_basic_output(self):
        formatter = JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        record = logging.LogRecord(
            name="mumble_sync.sync.router",
            level=logging.WARNING,
            pathname="router.py",
            lineno=1,
            msg="Dropping malformed %s event",
            args=("update",),
            exc_info=None,
        )

        data = json.loads(formatter.format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "mumble_sync.sync.router"
        assert data["msg"] == "Dropping malformed update event"
        assert "exc" not in data

    def test_includes_exception(self):
        formatter = JsonFormatter()
        try:
            raise ValueError("bad payload")
        except ValueError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            name="test",
            level=logging.ERROR,
            pathname="test.py",
            lineno=1,
            msg="failed",
            args=(),
            exc_info=exc_info,
        )
        output = formatter.format(record)

        assert "\n" not in output
        assert "bad payload" in json.loads(output)["exc"]
