"""Tests for logging configuration and formatters."""

import io
import json
import logging

import pytest

from standardizer.logging import ComponentLoggerAdapter, get_logger
from standardizer.logging.config import (
    SERVICE_NAME,
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from standardizer.logging.context import log_context


def make_record(message="Row normalized", **extra):
    return logging.getLogger("standardizer.test").makeRecord(
        "standardizer.test", logging.INFO, "test.py", 1, message, (), None, extra=extra or None
    )


def key_value_formatter():
    return KeyValueFormatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_mandatory_fields(self):
        """Test that output is JSON with timestamp, level, logger and message."""
        log_obj = json.loads(JSONFormatter().format(make_record()))

        assert log_obj["level"] == "INFO"
        assert log_obj["logger"] == "standardizer.test"
        assert log_obj["message"] == "Row normalized"
        assert log_obj["timestamp"].endswith("Z")
        assert len(log_obj["timestamp"]) == 24

    def test_extra_fields(self):
        """Test that structured extras are included with their types."""
        record = make_record(event="matching.batch.completed", title_count=3, parallel=False)
        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["event"] == "matching.batch.completed"
        assert log_obj["title_count"] == 3
        assert log_obj["parallel"] is False
        assert "name" not in log_obj

    def test_non_json_values_are_stringified(self):
        """Test that arbitrary objects do not break formatting."""
        log_obj = json.loads(JSONFormatter().format(make_record(path=object())))
        assert log_obj["path"].startswith("<object")

    def test_unicode_is_kept(self):
        """Test that non-ASCII titles are written as-is."""
        output = JSONFormatter().format(make_record("Geschäftsführer matched"))
        assert "Geschäftsführer" in output


class TestKeyValueFormatter:
    """Tests for KeyValueFormatter."""

    def test_basic_output(self):
        """Test the readable prefix."""
        output = key_value_formatter().format(make_record())
        assert "[INFO] standardizer.test: Row normalized" in output

    def test_extras_are_sorted_key_value_pairs(self):
        """Test extras rendering and quoting."""
        record = make_record(event="headers.mapped", unmapped_count=2, header="Job Title", ok=True)
        output = key_value_formatter().format(record)

        assert output.endswith('event=headers.mapped header="Job Title" ok=true unmapped_count=2')

    def test_service_fields_are_skipped(self):
        """Test that static metadata does not clutter readable output."""
        record = make_record(event="x")
        ContextualFilter(environment="test").filter(record)
        output = key_value_formatter().format(record)

        assert "service=" not in output
        assert "environment=" not in output


class TestContextualFilter:
    """Tests for ContextualFilter."""

    def test_adds_static_fields(self):
        """Test service and environment labels."""
        record = make_record()
        assert ContextualFilter(environment="staging").filter(record)
        assert record.service == SERVICE_NAME
        assert record.environment == "staging"

    def test_adds_context_fields(self):
        """Test that log_context fields land on the record."""
        with log_context(import_id="a1b2", row_number=7):
            record = make_record()
            ContextualFilter().filter(record)

        assert record.import_id == "a1b2"
        assert record.row_number == 7

    def test_explicit_extra_wins_over_context(self):
        """Test that call-site extras are not overwritten."""
        with log_context(row_number=7):
            record = make_record(row_number=9)
            ContextualFilter().filter(record)

        assert record.row_number == 9


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_invalid_level(self):
        """Test rejection of unknown levels."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD")

    def test_invalid_format(self):
        """Test rejection of unknown formats."""
        with pytest.raises(ValueError, match="Invalid log format"):
            configure_logging(format_type="xml")

    def test_json_end_to_end(self):
        """Test that a component logger inside a context emits one JSON line."""
        stream = io.StringIO()
        configure_logging(level="DEBUG", format_type="json", environment="test", stream=stream)

        with log_context(import_id="run-1"):
            get_logger("standardizer.test", component="matching").info(
                "Title resolved", extra={"event": "matching.title.resolved", "confidence": 80}
            )

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        resolved = lines[-1]
        assert lines[0]["event"] == "logging.configured"
        assert resolved["event"] == "matching.title.resolved"
        assert resolved["component"] == "matching"
        assert resolved["import_id"] == "run-1"
        assert resolved["environment"] == "test"
        assert resolved["confidence"] == 80

    def test_key_value_handler_installed(self):
        """Test handler and formatter selection."""
        configure_logging(level="WARNING", format_type="key-value", stream=io.StringIO())
        root_logger = logging.getLogger()

        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, KeyValueFormatter)
        assert root_logger.level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger()."""

    def test_plain_logger_without_component(self):
        """Test that no adapter is used without a component."""
        assert isinstance(get_logger("standardizer.test"), logging.Logger)

    def test_component_merged_with_call_extras(self):
        """Test that the adapter adds the component and keeps call extras."""
        adapter = get_logger("standardizer.test", component="library")
        assert isinstance(adapter, ComponentLoggerAdapter)

        _, kwargs = adapter.process("msg", {"extra": {"event": "library.verified"}})
        assert kwargs["extra"] == {"component": "library", "event": "library.verified"}
