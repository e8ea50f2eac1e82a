"""
Unit tests for banktx_sync.utils.logging

Covers JSON and console formatting, context logging, and environment-based
configuration.
"""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from banktx_sync.utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    setup_logging,
)


def _record(msg="Day reconciled", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="banktx_sync.sync",
        level=level,
        pathname="/app/sync.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        formatter = JSONFormatter()

        assert formatter.include_timestamp is True
        assert formatter.app_name == "banktx-sync"
        assert formatter.hostname is not None

    def test_format_basic_log_record(self):
        formatter = JSONFormatter(include_hostname=False)

        data = json.loads(formatter.format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "banktx_sync.sync"
        assert data["message"] == "Day reconciled"
        assert data["app"] == "banktx-sync"
        assert data["source"]["line"] == 42
        assert "timestamp" in data
        assert "hostname" not in data
        assert "context" not in data

    def test_format_with_extra_context(self):
        data = json.loads(JSONFormatter().format(_record(table="banktx", day="2017-05-22")))

        assert data["context"] == {"table": "banktx", "day": "2017-05-22"}

    def test_format_with_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "boom"


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_format_without_colors(self):
        formatter = ConsoleFormatter(use_colors=False)

        output = formatter.format(_record())

        assert "[INFO] banktx_sync.sync: Day reconciled" in output

    def test_format_with_extra_context(self):
        output = ConsoleFormatter(use_colors=False).format(_record(day="2017-05-22", operations=6))

        assert output.endswith("[day=2017-05-22, operations=6]")

    @patch("sys.stderr.isatty", return_value=True)
    def test_colors_do_not_leak_into_record(self, mock_isatty):
        record = _record(level=logging.WARNING)

        output = ConsoleFormatter(use_colors=True).format(record)

        assert "\033[33m" in output
        assert record.levelname == "WARNING"


class TestSetupLogging:
    """Test setup_logging function"""

    def test_setup_logging_with_custom_level(self, restore_root_logger):
        setup_logging(level="DEBUG")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1

    def test_invalid_level_defaults_to_info(self, restore_root_logger):
        setup_logging(level="LOUD")

        assert restore_root_logger.level == logging.INFO

    def test_json_file_logging(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "banktx.log"

        setup_logging(log_file=str(log_file), console_output=False, json_format=True)
        logging.getLogger("banktx_sync.test").info("written", extra={"day": "2017-05-22"})
        for handler in restore_root_logger.handlers:
            handler.flush()

        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["message"] == "written"
        assert data["context"]["day"] == "2017-05-22"

    def test_clears_existing_handlers(self, restore_root_logger):
        setup_logging()
        setup_logging()

        assert len(restore_root_logger.handlers) == 1

    def test_configure_from_env(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_JSON", "true")

        configure_from_env()

        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)


class TestContextLogger:
    """Test ContextLogger class"""

    def test_context_added_to_records(self, caplog):
        logger = ContextLogger("banktx_sync.test", table="banktx")

        with caplog.at_level(logging.INFO, logger="banktx_sync.test"):
            logger.info("Loaded", day="2017-05-22")

        record = caplog.records[-1]
        assert record.table == "banktx"
        assert record.day == "2017-05-22"

    def test_bind_creates_child(self):
        parent = ContextLogger("banktx_sync.test", table="banktx")

        child = parent.bind(day="2017-05-22")

        assert child.get_context() == {"table": "banktx", "day": "2017-05-22"}
        assert parent.get_context() == {"table": "banktx"}

    def test_get_context_returns_copy(self):
        logger = ContextLogger("banktx_sync.test", table="banktx")

        logger.get_context()["table"] = "other"

        assert logger.get_context() == {"table": "banktx"}
