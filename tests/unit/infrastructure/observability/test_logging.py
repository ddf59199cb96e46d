"""Tests for structured logging."""

import json
import logging
import sys

from animelog.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        test_id = "test-123-abc"
        result = set_correlation_id(test_id)
        assert result == test_id
        assert get_correlation_id() == test_id

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_adds_correlation_id(self):
        set_correlation_id("filter-id")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "filter-id"


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_replaces_handlers(self):
        """Calling twice must not duplicate output."""
        configure_logging(log_level="INFO", json_format=False)
        configure_logging(log_level="INFO", json_format=False)

        assert len(logging.getLogger().handlers) == 1

    def test_json_format_uses_json_formatter(self):
        configure_logging(log_level="INFO", json_format=True)

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, CustomJsonFormatter)

    def test_text_format_uses_compact_formatter(self):
        configure_logging(log_level="INFO", json_format=False)

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, CompactExceptionFormatter)

    def test_noisy_loggers_are_quieted(self):
        configure_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING


class TestFormatters:
    def test_json_record_fields(self):
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = logging.LogRecord("animelog.test", logging.WARNING, __file__, 42, "hello %s", ("you",), None)
        record.correlation_id = "json-id"

        data = json.loads(formatter.format(record))

        assert data["message"] == "hello you"
        assert data["level"] == "WARNING"
        assert data["logger"] == "animelog.test"
        assert data["correlation_id"] == "json-id"

    def test_compact_exception_chain_root_cause_first(self):
        formatter = CompactExceptionFormatter()
        try:
            try:
                raise ConnectionError("refused")
            except ConnectionError as e:
                raise RuntimeError("lookup failed") from e
        except RuntimeError:
            text = formatter.formatException(sys.exc_info())

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == ["╰─► ConnectionError: refused", "╰─► RuntimeError: lookup failed"]
