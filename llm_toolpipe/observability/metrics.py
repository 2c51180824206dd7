"""
Prometheus Metrics Module

This module provides Prometheus metrics for tool execution: how many calls
ran, how they ended, how long they took and how often they were retried.

Tool names come from model output and are therefore unbounded. Calls to a
name with no bound implementation are recorded under UNKNOWN_TOOL_LABEL so a
model inventing names cannot explode label cardinality.
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, generate_latest

UNKNOWN_TOOL_LABEL = "unknown"
SUCCESS_OUTCOME = "success"


# =============================================================================
# Tool Call Counter
# =============================================================================

TOOL_CALLS_TOTAL = Counter(
    name="llm_toolpipe_tool_calls_total",
    documentation="Total number of tool calls by terminal outcome",
    labelnames=["tool", "outcome"],
)

# =============================================================================
# Tool Call Latency Histogram
# =============================================================================

TOOL_CALL_DURATION_SECONDS = Histogram(
    name="llm_toolpipe_tool_call_duration_seconds",
    documentation="Tool call duration in seconds, retries included",
    labelnames=["tool"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# =============================================================================
# Retries and In-Flight Calls
# =============================================================================

TOOL_CALL_RETRIES_TOTAL = Counter(
    name="llm_toolpipe_tool_call_retries_total",
    documentation="Total number of retry attempts after a transient failure",
    labelnames=["tool"],
)

TOOL_CALLS_IN_PROGRESS = Gauge(
    name="llm_toolpipe_tool_calls_in_progress",
    documentation="Number of tool calls currently executing",
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_tool_call(tool: str, outcome: str, duration_seconds: float) -> None:
    """
    Record a tool call that reached a terminal state.

    Args:
        tool: Tool name (or UNKNOWN_TOOL_LABEL for unbound names)
        outcome: "success" or the error code of the failure
        duration_seconds: Wall time spent on the call
    """
    TOOL_CALLS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    TOOL_CALL_DURATION_SECONDS.labels(tool=tool).observe(duration_seconds)


def record_tool_retry(tool: str) -> None:
    """Record one retry attempt for a tool."""
    TOOL_CALL_RETRIES_TOTAL.labels(tool=tool).inc()


@contextmanager
def track_in_progress() -> Generator[None, None, None]:
    """Count the enclosed block as one in-flight tool call."""
    TOOL_CALLS_IN_PROGRESS.inc()
    try:
        yield
    finally:
        TOOL_CALLS_IN_PROGRESS.dec()


class Stopwatch:
    """Monotonic elapsed-time helper used around tool calls."""

    def __init__(self) -> None:
        self._started = time.perf_counter()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._started


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Metrics in Prometheus text exposition format
    """
    return generate_latest(REGISTRY)
