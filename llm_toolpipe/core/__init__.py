"""
Core module for the tool pipeline.

This module contains configuration and the exception hierarchy.
"""

from llm_toolpipe.core.config import Settings, get_settings
from llm_toolpipe.core.exceptions import (
    ErrorCode,
    InvalidToolArgumentsError,
    ProviderError,
    ToolDefinitionError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolPipeException,
    ToolTimeoutError,
    ToolValidationError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "ToolPipeException",
    "ToolNotFoundError",
    "InvalidToolArgumentsError",
    "ToolTimeoutError",
    "ToolExecutionError",
    "ToolDefinitionError",
    "ToolValidationError",
    "ProviderError",
]
