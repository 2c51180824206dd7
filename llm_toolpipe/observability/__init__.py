"""
Observability Package

This package provides:
- Structured JSON logging and the ToolLogger protocol
- Prometheus metrics for tool execution
"""

from llm_toolpipe.observability.logging import (
    ToolLogger,
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)
from llm_toolpipe.observability.metrics import (
    generate_metrics,
    record_tool_call,
    record_tool_retry,
    track_in_progress,
)

__all__ = [
    # Logging
    "ToolLogger",
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_context",
    # Metrics
    "generate_metrics",
    "record_tool_call",
    "record_tool_retry",
    "track_in_progress",
]
