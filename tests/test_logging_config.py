# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for sitesplitter.logging_config — structlog + stdlib bridge."""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest
import structlog

from sitesplitter.logging_config import configure


@pytest.fixture(autouse=True)
def _reset_logging():
    """Ensure clean logging state before/after each test."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    pil_level = logging.getLogger("PIL").level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    logging.getLogger("PIL").setLevel(pil_level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestConsoleRenderer:
    def test_defaults_to_stderr(self):
        configure(json_output=False)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_console_output_is_human_readable(self):
        stream = io.StringIO()
        configure(json_output=False, stream=stream)
        logging.getLogger("test.console").info("hello world")
        output = stream.getvalue()
        assert "hello world" in output
        assert not output.strip().startswith("{")

    def test_console_includes_log_level(self):
        stream = io.StringIO()
        configure(stream=stream)
        logging.getLogger("test.level").warning("test warn")
        assert "warn" in stream.getvalue().lower()


class TestJSONRenderer:
    def test_json_output_is_valid_json(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        logging.getLogger("test.json").info("json test")
        parsed = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert parsed["event"] == "json test"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "test.json"
        assert "timestamp" in parsed

    def test_contextvars_merged(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        with structlog.contextvars.bound_contextvars(request_id="abc123"):
            logging.getLogger("test.ctx").info("with context")
        parsed = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert parsed["request_id"] == "abc123"


class TestLevels:
    def test_level_applied(self):
        configure(level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_lowercase_level(self):
        configure(level="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure(level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_below_level_suppressed(self):
        stream = io.StringIO()
        configure(level="WARNING", stream=stream)
        logging.getLogger("test.quiet").info("hidden")
        assert "hidden" not in stream.getvalue()

    def test_pillow_debug_quieted(self):
        configure(level="DEBUG")
        assert logging.getLogger("PIL").level == logging.INFO

    def test_reconfigure_replaces_handler(self):
        configure()
        configure(json_output=True)
        assert len(logging.getLogger().handlers) == 1
