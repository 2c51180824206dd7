"""
llm-toolpipe - tool invocation pipeline for LLM conversations.

Declare tools in a ToolRegistry, bind implementations on a ToolExecutor,
validate definitions against a provider's conventions, and run the
model-issued tool calls under a timeout, retry and concurrency policy.
"""

from llm_toolpipe.core.exceptions import ErrorCode, ToolPipeException
from llm_toolpipe.models.domain import (
    ExecutorConfig,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
    ToolValidationReport,
)
from llm_toolpipe.tools.executor import ToolExecutor
from llm_toolpipe.tools.registry import ToolRegistry

__version__ = "1.0.0"

__all__ = [
    "ErrorCode",
    "ExecutorConfig",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDefinition",
    "ToolExecutor",
    "ToolPipeException",
    "ToolRegistry",
    "ToolValidationReport",
]
