"""Tests for structured logging configuration."""

import json

import pytest

from prd_builder.logging_config import (
    MAX_FIELD_CHARS,
    TRUNCATION_MARK,
    bind_session_id,
    clear_session_id,
    configure_logging,
    get_bound_session_id,
    get_logger,
    redact_fields,
    session_context,
)


def _json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.strip().split("\n") if line.strip()]


class TestLoggingConfiguration:
    """Test configure_logging function."""

    def test_configure_logging_is_idempotent(self) -> None:
        """configure_logging can be called multiple times without side effects."""
        configure_logging(log_level="DEBUG")
        configure_logging(log_level="DEBUG")
        configure_logging(log_level="INFO")

    def test_configure_logging_accepts_valid_levels(self) -> None:
        import prd_builder.logging_config as logging_config_module

        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "info"]:
            logging_config_module._CONFIGURED = False
            configure_logging(log_level=level)


class TestSessionIdBinding:
    """Test session_id context management."""

    def setup_method(self) -> None:
        clear_session_id()

    def test_get_bound_session_id_default(self) -> None:
        assert get_bound_session_id() is None

    def test_bind_and_get_session_id(self) -> None:
        bind_session_id("session-123")
        assert get_bound_session_id() == "session-123"

    def test_rebind_replaces_value(self) -> None:
        bind_session_id("session-1")
        bind_session_id("session-2")
        assert get_bound_session_id() == "session-2"

    def test_clear_session_id(self) -> None:
        bind_session_id("session-1")
        clear_session_id()
        assert get_bound_session_id() is None


class TestStructuredLoggingOutput:
    """Test structured logging output format."""

    def test_log_includes_session_id(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="DEBUG")
        bind_session_id("test-session")

        logger = get_logger("prd_builder.test_module")
        logger.info("test message", extra_field="extra_value")
        clear_session_id()

        for data in _json_lines(capsys.readouterr().out):
            assert data.get("session_id") == "test-session"
            assert data.get("extra_field") == "extra_value"

    def test_log_record_shape(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="DEBUG")

        logger = get_logger("prd_builder.test_module")
        logger.warning("test warning level")

        for data in _json_lines(capsys.readouterr().out):
            assert data["level"] == "warning"
            assert data["logger"] == "prd_builder.test_module"
            assert "timestamp" in data


class TestSessionContext:
    """Test the session_context helper."""

    def test_binds_inside_block_only(self) -> None:
        clear_session_id()
        with session_context("session-9"):
            assert get_bound_session_id() == "session-9"
        assert get_bound_session_id() is None

    def test_clears_on_error(self) -> None:
        clear_session_id()
        with pytest.raises(RuntimeError):
            with session_context("session-9"):
                raise RuntimeError("boom")
        assert get_bound_session_id() is None


class TestRedactFields:
    """Test the field redaction processor."""

    def test_long_string_is_truncated(self) -> None:
        event = redact_fields(None, "info", {"event": "x", "message": "a" * 250})
        assert event["message"] == "a" * MAX_FIELD_CHARS + TRUNCATION_MARK

    def test_short_string_untouched(self) -> None:
        event = redact_fields(None, "info", {"event": "x", "message": "hello"})
        assert event["message"] == "hello"

    def test_bytes_are_dropped(self) -> None:
        event = redact_fields(None, "info", {"event": "x", "data": b"\x00\x01", "name": "a.pdf"})
        assert "data" not in event
        assert event["name"] == "a.pdf"

    def test_event_name_is_preserved(self) -> None:
        long_event = "e" * 150
        event = redact_fields(None, "info", {"event": long_event})
        assert event["event"] == long_event

    def test_non_string_values_untouched(self) -> None:
        event = redact_fields(None, "info", {"event": "x", "count": 3, "ids": ["a"]})
        assert event["count"] == 3
        assert event["ids"] == ["a"]

    def test_applied_to_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="DEBUG")

        logger = get_logger("prd_builder.test_module")
        logger.info("long field", error="x" * 400, payload=b"raw")

        lines = [d for d in _json_lines(capsys.readouterr().out) if d.get("event") == "long field"]
        assert lines
        for data in lines:
            assert len(data["error"]) == MAX_FIELD_CHARS + len(TRUNCATION_MARK)
            assert "payload" not in data
