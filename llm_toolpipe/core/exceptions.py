"""
Custom exceptions for the tool invocation pipeline.

This module provides the exception hierarchy used by the registry, the
executor and the provider boundary. All exceptions inherit from
ToolPipeException and carry an ErrorCode, the same codes that appear in
failed ToolCallResult entries.

Propagation rules:
- Batch execution never raises for individual calls; failures become
  ToolCallResult(success=False) entries carrying one of these codes.
- The direct execution path (ToolExecutor.execute_tool) raises them.
- Registration conflicts are never raised; they are a False return value.
- An implementation raising one of these keeps its error_code in the
  failed result, and the executor retries it only when it is retryable.
"""

from enum import Enum
from typing import Any, Optional


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(str, Enum):
    """
    Machine-readable error codes.

    The values are the wire-level codes reported to the model inside a
    failed tool result, so they are lower_snake_case strings.
    """

    TOOL_NOT_FOUND = "tool_not_found"
    INVALID_ARGUMENTS = "invalid_arguments"
    EXECUTION_TIMEOUT = "execution_timeout"
    EXECUTION_ERROR = "execution_error"
    REGISTRATION_CONFLICT = "registration_conflict"
    INVALID_DEFINITION = "invalid_definition"
    PROVIDER_VALIDATION_ERROR = "provider_validation_error"
    PROVIDER_ERROR = "provider_error"


RETRYABLE_ERROR_CODES = frozenset(
    {ErrorCode.EXECUTION_TIMEOUT, ErrorCode.EXECUTION_ERROR}
)


# =============================================================================
# Base Exception
# =============================================================================


class ToolPipeException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)

    @property
    def retryable(self) -> bool:
        """Whether a retry could change the outcome."""
        return self.error_code in RETRYABLE_ERROR_CODES


# =============================================================================
# Tool Execution Errors
# =============================================================================


class ToolNotFoundError(ToolPipeException):
    """Raised when no implementation is bound to the requested tool name."""

    def __init__(self, tool_name: str, **kwargs: Any) -> None:
        super().__init__(
            f"Tool not found: {tool_name}", ErrorCode.TOOL_NOT_FOUND, **kwargs
        )
        self.tool_name = tool_name


class InvalidToolArgumentsError(ToolPipeException):
    """
    Raised when a tool call's arguments cannot be used.

    Covers malformed JSON, JSON that is not an object, and arguments that do
    not match the tool's declared parameter schema.

    Attributes:
        tool_name: Name of the tool whose arguments were rejected.
        field: The offending argument name, when a single field is at fault.
    """

    def __init__(
        self,
        message: str,
        tool_name: str,
        field: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_ARGUMENTS, **kwargs)
        self.tool_name = tool_name
        self.field = field


class ToolTimeoutError(ToolPipeException):
    """
    Raised when an implementation does not finish within its budget.

    Attributes:
        tool_name: Name of the tool that timed out.
        timeout_ms: The budget that was exceeded, in milliseconds.
    """

    def __init__(self, tool_name: str, timeout_ms: int, **kwargs: Any) -> None:
        super().__init__(
            f"Tool execution timed out after {timeout_ms}ms",
            ErrorCode.EXECUTION_TIMEOUT,
            **kwargs,
        )
        self.tool_name = tool_name
        self.timeout_ms = timeout_ms


class ToolExecutionError(ToolPipeException):
    """
    Exception for tool execution failures.

    Implementations raise it to control how their failure is reported: the
    executor copies error_code into the failed result and retries only when
    the code is retryable. Pass error_code=ErrorCode.INVALID_ARGUMENTS for
    arguments that pass the schema but are semantically wrong.

    Attributes:
        tool_name: Name of the tool that failed.
        tool_call_id: ID of the tool call (for correlation).
    """

    def __init__(
        self,
        message: str,
        tool_name: str,
        tool_call_id: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id


# =============================================================================
# Registry and Provider Errors
# =============================================================================


class ToolDefinitionError(ToolPipeException):
    """
    Raised when a tool definition is structurally corrupt.

    This signals a programming error in the host (for example a definition
    without a name), so registration fails fast instead of returning False.
    """

    def __init__(
        self, message: str, field: Optional[str] = None, **kwargs: Any
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_DEFINITION, **kwargs)
        self.field = field


class ToolValidationError(ToolPipeException):
    """
    Raised by provider adapters that refuse an incompatible tool set.

    Attributes:
        provider: Provider the tools were validated against.
        invalid_tools: Names of the definitions that failed validation.
        messages: One human-readable message per violation.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        invalid_tools: Optional[list[str]] = None,
        messages: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, ErrorCode.PROVIDER_VALIDATION_ERROR, **kwargs)
        self.provider = provider
        self.invalid_tools = list(invalid_tools or [])
        self.messages = list(messages or [])


class ProviderError(ToolPipeException):
    """
    Exception for LLM provider issues.

    Attributes:
        provider: Name of the provider (e.g., "anthropic", "openai").
        status_code: HTTP status code from the provider API (if applicable).
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, ErrorCode.PROVIDER_ERROR, **kwargs)
        self.provider = provider
        self.status_code = status_code
