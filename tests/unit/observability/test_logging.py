"""
Tests for structured logging and the ToolLogger protocol.
"""

import io
import json
import logging
from unittest.mock import MagicMock

import pytest

from llm_toolpipe.observability.logging import (
    ToolLogger,
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    reset_logging,
    set_correlation_id,
)


@pytest.fixture
def log_stream():
    """Fresh structlog configuration writing to an in-memory stream."""
    stream = io.StringIO()
    reset_logging()
    configure_logging(level="DEBUG", stream=stream, force=True)
    yield stream
    reset_logging()
    clear_correlation_id()


def read_lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestToolLoggerProtocol:
    def test_structlog_logger_satisfies_protocol(self, log_stream: io.StringIO) -> None:
        assert isinstance(get_logger("test"), ToolLogger)

    def test_stdlib_logger_satisfies_protocol(self) -> None:
        assert isinstance(logging.getLogger("test"), ToolLogger)

    def test_mock_satisfies_protocol(self) -> None:
        assert isinstance(MagicMock(), ToolLogger)


class TestJsonOutput:
    def test_event_is_json_with_level_and_name(self, log_stream: io.StringIO) -> None:
        get_logger("llm_toolpipe.tools.executor").info("Tool echo executed")

        (line,) = read_lines(log_stream)
        assert line["event"] == "Tool echo executed"
        assert line["level"] == "info"
        assert line["logger"] == "llm_toolpipe.tools.executor"
        assert "timestamp" in line

    def test_level_filtering(self) -> None:
        stream = io.StringIO()
        reset_logging()
        configure_logging(level="WARNING", stream=stream, force=True)
        try:
            logger = get_logger("test")
            logger.debug("hidden")
            logger.warning("shown")
        finally:
            reset_logging()

        assert [line["event"] for line in read_lines(stream)] == ["shown"]

    def test_configure_is_idempotent_without_force(self, log_stream: io.StringIO) -> None:
        other = io.StringIO()
        configure_logging(level="DEBUG", stream=other)

        get_logger("test").info("still here")

        assert other.getvalue() == ""
        assert read_lines(log_stream)[0]["event"] == "still here"


class TestCorrelationId:
    def test_set_and_clear(self) -> None:
        set_correlation_id("turn-1")
        assert get_correlation_id() == "turn-1"

        clear_correlation_id()
        assert get_correlation_id() is None

    def test_context_manager_restores(self) -> None:
        set_correlation_id("outer")
        with correlation_id_context("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"
        clear_correlation_id()

    def test_correlation_id_in_output(self, log_stream: io.StringIO) -> None:
        with correlation_id_context("turn-42"):
            get_logger("test").info("with id")
        get_logger("test").info("without id")

        with_id, without_id = read_lines(log_stream)
        assert with_id["correlation_id"] == "turn-42"
        assert "correlation_id" not in without_id
