"""Tests for structured logging configuration."""

import json
import logging
import sys

import pytest

from cloudscore.logging_config import (
    JSONFormatter,
    LogContext,
    LogRecord,
    StructuredLogger,
    TextFormatter,
    clear_context,
    configure_logging,
    get_context,
    get_logger,
    new_request_id,
)


def _record(name="cloudscore.scores", level=logging.INFO, msg="Test message", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


@pytest.fixture
def restore_logging():
    """Undo configure_logging changes to the root and package loggers."""
    root = logging.getLogger()
    sdk = logging.getLogger("cloudscore")
    saved = (root.level, root.handlers[:], sdk.level, sdk.propagate)
    yield
    for handler in root.handlers[:]:
        if handler not in saved[1]:
            handler.close()
        root.removeHandler(handler)
    root.setLevel(saved[0])
    for handler in saved[1]:
        root.addHandler(handler)
    sdk.setLevel(saved[2])
    sdk.propagate = saved[3]


class TestLogRecord:
    """Test LogRecord dataclass."""

    def test_record_with_fields(self):
        """Custom fields are flattened into the output."""
        record = LogRecord(
            timestamp="2024-01-01T00:00:00Z",
            level="DEBUG",
            logger="test",
            message="Fetching",
            fields={"page": 2, "limit": 10},
        )
        d = record.to_dict()
        assert d["page"] == 2
        assert d["limit"] == 10

    def test_record_with_request_context(self):
        record = LogRecord(
            timestamp="2024-01-01T00:00:00Z",
            level="INFO",
            logger="test",
            message="Request completed",
            request_id="req_000001_1",
            board="arena",
            domain="private",
        )
        d = record.to_dict()
        assert d["request_id"] == "req_000001_1"
        assert d["board"] == "arena"
        assert d["domain"] == "private"

    def test_empty_context_omitted(self):
        d = LogRecord(timestamp="t", level="INFO", logger="test", message="m").to_dict()
        assert set(d) == {"ts", "level", "logger", "msg"}

    def test_to_text(self):
        """Text format shows request and board context."""
        record = LogRecord(
            timestamp="2024-01-01 00:00:00",
            level="INFO",
            logger="scores",
            message="Hello",
            request_id="req_1",
            board="arena",
            domain="global",
        )
        text = record.to_text()
        assert "[INFO]" in text
        assert "[req_1]" in text
        assert "[global/arena]" in text
        assert text.endswith("Hello")


class TestFormatters:
    """Test JSON and text formatters."""

    def test_json_basic(self):
        parsed = json.loads(JSONFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["msg"] == "Test message"
        assert parsed["logger"] == "cloudscore.scores"

    def test_json_structured_fields(self):
        record = _record(msg="Request completed")
        record.structured_fields = {"status": 200, "attempts": 2}
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["status"] == 200
        assert parsed["attempts"] == 2

    def test_json_picks_up_context(self):
        with LogContext(request_id="req_9", board="arena", domain="private"):
            parsed = json.loads(JSONFormatter().format(_record()))
        assert parsed["request_id"] == "req_9"
        assert parsed["board"] == "arena"

    def test_json_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        parsed = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))
        assert parsed["exception"]["type"] == "ValueError"
        assert "Test error" in parsed["exception"]["message"]

    def test_text_short_logger_name(self):
        output = TextFormatter().format(_record())
        assert "[INFO]" in output
        assert "[scores]" in output
        assert "Test message" in output

    def test_text_fields(self):
        record = _record()
        record.structured_fields = {"attempt": 3}
        assert "attempt=3" in TextFormatter().format(record)


class TestLogContext:
    """Test context propagation."""

    def test_context_applies_and_resets(self):
        assert get_context() == {}
        with LogContext(board="arena"):
            assert get_context() == {"board": "arena"}
            with LogContext(request_id="req_1"):
                assert get_context() == {"board": "arena", "request_id": "req_1"}
            assert get_context() == {"board": "arena"}
        assert get_context() == {}

    def test_clear_context(self):
        with LogContext(board="arena"):
            clear_context()
            assert get_context() == {}

    def test_request_ids_unique(self):
        ids = {new_request_id() for _ in range(100)}
        assert len(ids) == 100
        assert all(request_id.startswith("req_") for request_id in ids)


class TestStructuredLogger:
    """Test StructuredLogger wrapper."""

    def test_caches_loggers(self):
        assert get_logger("cloudscore.test") is get_logger("cloudscore.test")
        assert isinstance(get_logger("cloudscore.test"), StructuredLogger)

    def test_fields_attached_to_record(self, caplog):
        logger = get_logger("cloudscore.test.fields")
        with caplog.at_level(logging.INFO, logger="cloudscore.test.fields"):
            logger.info("Retrying request", attempt=2, delay=0.5)

        record = caplog.records[-1]
        assert record.getMessage() == "Retrying request"
        assert record.structured_fields == {"attempt": 2, "delay": 0.5}

    def test_disabled_level_skipped(self, caplog):
        logger = get_logger("cloudscore.test.quiet")
        with caplog.at_level(logging.WARNING, logger="cloudscore.test.quiet"):
            logger.debug("hidden")
        assert not [r for r in caplog.records if r.name == "cloudscore.test.quiet"]


class TestConfigureLogging:
    """Test logging configuration."""

    def test_configure_json(self, restore_logging):
        configure_logging(level="DEBUG", json_output=True)
        root = logging.getLogger()
        assert any(isinstance(h.formatter, JSONFormatter) for h in root.handlers)
        assert logging.getLogger("cloudscore").level == logging.DEBUG

    def test_configure_text(self, restore_logging):
        configure_logging(level="INFO", json_output=False)
        root = logging.getLogger()
        assert any(isinstance(h.formatter, TextFormatter) for h in root.handlers)

    def test_configure_level(self, restore_logging):
        configure_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_file(self, restore_logging, tmp_path):
        log_file = tmp_path / "cloudscore.log"
        configure_logging(level="INFO", json_output=True, log_file=str(log_file))

        logging.getLogger("cloudscore.test.file").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert json.loads(log_file.read_text().strip())["msg"] == "written"
