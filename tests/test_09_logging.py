"""Tests for the logging level system, console colors and JSONL output."""
from __future__ import annotations

import io
import json
import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def restore_logging():
    """Leave the process at NORMAL level with a plain stdout handler."""
    yield
    from voicegen.core.logging import configure_logging

    with patch.dict(os.environ, {"VOICEGEN_LOG_DIR": ""}):
        configure_logging(level=2, force=True)


class TestLogLevelEnum:
    """Test LogLevel enum values."""

    def test_level_enum_values(self):
        from voicegen.core.logging import LogLevel

        assert LogLevel.MINIMAL == 1
        assert LogLevel.NORMAL == 2
        assert LogLevel.VERBOSE == 3
        assert LogLevel.DEBUG == 4

    def test_level_enum_ordering(self):
        from voicegen.core.logging import LogLevel

        assert LogLevel.MINIMAL < LogLevel.NORMAL < LogLevel.VERBOSE < LogLevel.DEBUG


class TestLevelCoercion:
    """Test level coercion from various input types."""

    def test_level_from_int(self):
        from voicegen.core.logging import LogLevel, coerce_level

        assert coerce_level(1) == LogLevel.MINIMAL
        assert coerce_level(4) == LogLevel.DEBUG

    def test_level_from_names(self):
        from voicegen.core.logging import LogLevel, coerce_level

        assert coerce_level("verbose") == LogLevel.VERBOSE
        assert coerce_level("TRACE") == LogLevel.DEBUG
        assert coerce_level("INFO") == LogLevel.NORMAL
        assert coerce_level("WARNING") == LogLevel.MINIMAL
        assert coerce_level("3") == LogLevel.VERBOSE

    def test_stdlib_levels(self):
        from voicegen.core.logging import LogLevel, coerce_level

        assert coerce_level(logging.ERROR) == LogLevel.MINIMAL
        assert coerce_level(logging.INFO) == LogLevel.NORMAL

    def test_invalid_defaults_to_normal(self):
        from voicegen.core.logging import LogLevel, coerce_level

        assert coerce_level("invalid") == LogLevel.NORMAL
        assert coerce_level(None) == LogLevel.NORMAL


class TestLevelFiltering:
    """Test that log messages are filtered by level."""

    def test_minimal(self):
        from voicegen.core.logging import configure_logging, debug, fail, get_logger, info

        captured = io.StringIO()
        with patch("sys.stdout", captured):
            configure_logging(level=1, force=True)
            log = get_logger("test_minimal")

            info(log, "info message")
            fail(log, "fail message")
            debug(log, "debug message")

        output = captured.getvalue()
        assert "fail message" in output
        assert "info message" not in output
        assert "debug message" not in output

    def test_normal(self):
        from voicegen.core.logging import configure_logging, get_logger, info, success, verbose

        captured = io.StringIO()
        with patch("sys.stdout", captured):
            configure_logging(level=2, force=True)
            log = get_logger("test_normal")

            info(log, "info message")
            success(log, "success message")
            verbose(log, "verbose message")

        output = captured.getvalue()
        assert "info message" in output
        assert "success message" in output
        assert "verbose message" not in output

    def test_debug_shows_everything(self):
        from voicegen.core.logging import configure_logging, debug, get_logger, info, verbose

        captured = io.StringIO()
        with patch("sys.stdout", captured):
            configure_logging(level=4, force=True)
            log = get_logger("test_debug")

            info(log, "info message")
            verbose(log, "verbose message")
            debug(log, "debug message")

        output = captured.getvalue()
        assert "info message" in output
        assert "verbose message" in output
        assert "debug message" in output


class TestRequestIdAndFields:

    def test_request_id_in_output(self):
        from voicegen.core.logging import configure_logging, get_logger, info, set_request_id

        captured = io.StringIO()
        with patch("sys.stdout", captured):
            configure_logging(level=2, force=True)
            set_request_id("rid-abc-123")
            info(get_logger("test_rid"), "message with rid", voice="coral")
            set_request_id("-")

        output = captured.getvalue()
        assert "rid-abc-123" in output
        assert "voice=coral" in output

    def test_env_override(self):
        from voicegen.core.logging import LogLevel, configure_logging, get_level

        with patch.dict(os.environ, {"VOICEGEN_LOG_LEVEL": "3"}):
            configure_logging(force=True)
            assert get_level() == LogLevel.VERBOSE


class TestColors:

    def test_no_color_env(self):
        from voicegen.core.logging import supports_color

        with patch.dict(os.environ, {"VOICEGEN_NO_COLOR": "1"}):
            assert supports_color() is False

    def test_colorize_toggle(self):
        from voicegen.core.logging import formatters

        original = formatters.USE_COLORS
        try:
            formatters.USE_COLORS = True
            colored = formatters.colorize("x", formatters.Colors.RED)
            assert formatters.Colors.RED in colored and formatters.Colors.RESET in colored

            formatters.USE_COLORS = False
            assert formatters.colorize("x", formatters.Colors.RED) == "x"
        finally:
            formatters.USE_COLORS = original


class TestJsonlOutput:

    def test_jsonl_lines(self):
        from voicegen.core.logging import configure_logging, get_logger, info

        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"VOICEGEN_LOG_DIR": tmpdir}):
                configure_logging(level=2, force=True)
                info(get_logger("test_jsonl"), "jsonl message", code="abc", seconds=0.25)

                for handler in logging.getLogger().handlers:
                    handler.flush()

                lines = (Path(tmpdir) / "voicegen.jsonl").read_text(encoding="utf-8").splitlines()

                for handler in list(logging.getLogger().handlers):
                    handler.close()
                logging.getLogger().handlers = []

        record = json.loads(lines[-1])
        assert record["message"] == "jsonl message"
        assert record["tag"] == "INFO"
        assert record["seconds"] == 0.25
        assert record["extra"] == {"code": "abc"}
