"""Services Package - conversation orchestration and wiring."""

from llm_toolpipe.services.factory import (
    create_tool_executor,
    create_tool_loop,
    create_tool_registry,
)
from llm_toolpipe.services.tool_loop import DEFAULT_MAX_TOOL_ITERATIONS, ToolCallLoop

__all__ = [
    "DEFAULT_MAX_TOOL_ITERATIONS",
    "ToolCallLoop",
    "create_tool_executor",
    "create_tool_loop",
    "create_tool_registry",
]
