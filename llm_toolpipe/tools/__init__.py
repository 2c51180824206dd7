"""
Tools Package - Tool Registry, Validation and Execution

This package provides the tool registry for managing declared tools,
provider-facing validation of tool definitions, and the executor for
running model-issued tool calls.
"""

from llm_toolpipe.tools.executor import ToolExecutor, ToolImplementation, serialize_output
from llm_toolpipe.tools.registry import ToolRegistry
from llm_toolpipe.tools.validation import (
    PROVIDER_RULES,
    ProviderId,
    ProviderToolRules,
    supported_providers,
    validate_tool_definitions,
)

__all__ = [
    "ToolRegistry",
    "ToolExecutor",
    "ToolImplementation",
    "serialize_output",
    "PROVIDER_RULES",
    "ProviderId",
    "ProviderToolRules",
    "supported_providers",
    "validate_tool_definitions",
]
