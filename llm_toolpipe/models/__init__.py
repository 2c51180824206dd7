"""Models Package - domain and provider boundary models."""

from llm_toolpipe.models.domain import (
    ExecutorConfig,
    ToolCallError,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
    ToolValidationReport,
)
from llm_toolpipe.models.provider import (
    ChatMessage,
    ProviderRequest,
    ProviderResponse,
    Usage,
)

__all__ = [
    # Domain
    "ExecutorConfig",
    "ToolCallError",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDefinition",
    "ToolValidationReport",
    # Provider boundary
    "ChatMessage",
    "ProviderRequest",
    "ProviderResponse",
    "Usage",
]
