"""
Tests for Prometheus metrics recorded by the tool executor.

Counters are process-global, so assertions compare before/after samples.
"""

from typing import Optional
from unittest.mock import MagicMock

import pytest
from prometheus_client import REGISTRY

from llm_toolpipe.models.domain import ExecutorConfig, ToolCallRequest
from llm_toolpipe.observability.metrics import (
    UNKNOWN_TOOL_LABEL,
    Stopwatch,
    generate_metrics,
    record_tool_call,
    record_tool_retry,
    track_in_progress,
)
from llm_toolpipe.tools.executor import ToolExecutor
from llm_toolpipe.tools.registry import ToolRegistry


def calls_total(tool: str, outcome: str) -> float:
    value: Optional[float] = REGISTRY.get_sample_value(
        "llm_toolpipe_tool_calls_total", {"tool": tool, "outcome": outcome}
    )
    return value or 0.0


def retries_total(tool: str) -> float:
    value = REGISTRY.get_sample_value("llm_toolpipe_tool_call_retries_total", {"tool": tool})
    return value or 0.0


def in_progress() -> float:
    return REGISTRY.get_sample_value("llm_toolpipe_tool_calls_in_progress") or 0.0


class TestHelpers:
    def test_record_tool_call(self) -> None:
        before = calls_total("metrics_sample_tool", "success")

        record_tool_call("metrics_sample_tool", "success", 0.01)

        assert calls_total("metrics_sample_tool", "success") == before + 1
        count = REGISTRY.get_sample_value(
            "llm_toolpipe_tool_call_duration_seconds_count", {"tool": "metrics_sample_tool"}
        )
        assert count is not None and count >= 1

    def test_record_tool_retry(self) -> None:
        before = retries_total("metrics_sample_tool")

        record_tool_retry("metrics_sample_tool")

        assert retries_total("metrics_sample_tool") == before + 1

    def test_track_in_progress(self) -> None:
        before = in_progress()

        with track_in_progress():
            assert in_progress() == before + 1

        assert in_progress() == before

    def test_track_in_progress_on_error(self) -> None:
        before = in_progress()

        with pytest.raises(RuntimeError):
            with track_in_progress():
                raise RuntimeError("boom")

        assert in_progress() == before

    def test_stopwatch(self) -> None:
        assert Stopwatch().elapsed >= 0

    def test_generate_metrics(self) -> None:
        output = generate_metrics()

        assert isinstance(output, bytes)
        assert b"llm_toolpipe_tool_calls_total" in output


class TestExecutorMetrics:
    @pytest.mark.asyncio
    async def test_outcomes_recorded(self, mock_logger: MagicMock) -> None:
        def flaky_fail(args: dict) -> str:
            raise RuntimeError("nope")

        executor = ToolExecutor(
            ToolRegistry(mock_logger),
            {"metrics_ok": lambda args: "ok", "metrics_fail": flaky_fail},
            mock_logger,
            ExecutorConfig(max_retries=1),
        )
        ok_before = calls_total("metrics_ok", "success")
        fail_before = calls_total("metrics_fail", "execution_error")
        retry_before = retries_total("metrics_fail")
        unknown_before = calls_total(UNKNOWN_TOOL_LABEL, "tool_not_found")

        await executor.execute_tool_calls(
            [
                ToolCallRequest(call_id="1", name="metrics_ok"),
                ToolCallRequest(call_id="2", name="metrics_fail"),
                ToolCallRequest(call_id="3", name="made_up_by_the_model"),
            ]
        )

        assert calls_total("metrics_ok", "success") == ok_before + 1
        assert calls_total("metrics_fail", "execution_error") == fail_before + 1
        assert retries_total("metrics_fail") == retry_before + 1
        assert calls_total(UNKNOWN_TOOL_LABEL, "tool_not_found") == unknown_before + 1
        assert calls_total("made_up_by_the_model", "tool_not_found") == 0
