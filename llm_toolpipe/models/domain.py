"""
Domain Models - Tool Definitions, Tool Calls and Tool Results

This module contains the domain models of the tool invocation pipeline:
what a tool looks like to a model (ToolDefinition), what a model asks for
(ToolCallRequest), what the executor hands back (ToolCallResult), and how
the executor is tuned (ExecutorConfig).

Pattern: Domain models as value objects (frozen Pydantic models)
Pattern: Result object with exactly one populated variant

Note: these models are provider-neutral. Provider-specific wire shapes are
produced and consumed by the tool handlers in llm_toolpipe.providers.
"""

import json
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, Field, model_validator

from llm_toolpipe.core.exceptions import ErrorCode

if TYPE_CHECKING:
    from llm_toolpipe.core.config import Settings


# =============================================================================
# ToolDefinition Model
# =============================================================================


class ToolDefinition(BaseModel):
    """
    Tool definition schema for tool registration.

    This is the metadata describing a tool: its name, what it does, and the
    JSON Schema for its parameters. It does not include the implementation;
    implementations are bound separately on the executor.

    Attributes:
        name: Unique tool identifier (registry key).
        description: Human-readable description shown to the model.
        parameters: JSON Schema defining the tool's input parameters.

    Example:
        >>> tool = ToolDefinition(
        ...     name="read_file",
        ...     description="Read a file relative to the workspace",
        ...     parameters={
        ...         "type": "object",
        ...         "properties": {
        ...             "path": {"type": "string", "description": "File path"}
        ...         },
        ...         "required": ["path"]
        ...     }
        ... )
    """

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    description: str = Field(default="", description="Human-readable description")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for input parameters",
    )

    model_config = {"frozen": True}

    @property
    def required_arguments(self) -> list[str]:
        """Names listed under the schema's 'required' key."""
        required = self.parameters.get("required", [])
        return list(required) if isinstance(required, list) else []

    def to_openai_format(self) -> dict[str, Any]:
        """
        Convert to the OpenAI function-tool shape.

        Returns:
            {"type": "function", "function": {"name", "description", "parameters"}}
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


# =============================================================================
# ToolCallRequest Model
# =============================================================================


class ToolCallRequest(BaseModel):
    """
    A model-issued request to execute a tool.

    Produced by a provider tool handler from the provider's native response
    shape. The arguments stay serialized: parsing them is the executor's job,
    since a malformed payload must become a structured failure rather than
    an exception in the adapter.

    Attributes:
        call_id: Correlation identifier assigned by the provider.
        name: Name of the tool to execute.
        arguments_json: Raw JSON arguments (untrusted, may be malformed).
    """

    call_id: str = Field(..., description="Provider-assigned call identifier")
    name: str = Field(..., description="Name of tool to execute")
    arguments_json: str = Field(default="{}", description="Serialized arguments")

    model_config = {"frozen": True}

    @classmethod
    def from_arguments(
        cls, call_id: str, name: str, arguments: dict[str, Any]
    ) -> "ToolCallRequest":
        """Build a request from already-structured arguments."""
        return cls(call_id=call_id, name=name, arguments_json=json.dumps(arguments))

    def arguments_for_echo(self) -> dict[str, Any]:
        """
        Decode arguments for replaying the assistant turn to a provider.

        Unlike the executor this never rejects: a payload that is malformed,
        too deeply nested, or not an object is replayed as {"_raw": payload},
        so a turn whose call failed with invalid_arguments can still be sent
        back. An empty payload is {}.
        """
        if not self.arguments_json.strip():
            return {}
        try:
            arguments = json.loads(self.arguments_json)
        except (RecursionError, ValueError):
            return {"_raw": self.arguments_json}
        if not isinstance(arguments, dict):
            return {"_raw": self.arguments_json}
        return arguments


# =============================================================================
# ToolCallResult Model
# =============================================================================


class ToolCallError(BaseModel):
    """Structured failure reported back to the model."""

    code: ErrorCode = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")

    model_config = {"frozen": True}


class ToolCallResult(BaseModel):
    """
    Result of executing one tool call.

    Exactly one variant is populated: a successful result carries a string
    output, a failed one carries an error. Output is always a string so the
    provider formatting downstream never branches on type.

    Example:
        >>> ToolCallResult.ok("call_1", "42")
        >>> ToolCallResult.failed("call_2", ErrorCode.TOOL_NOT_FOUND, "Tool not found: x")
    """

    call_id: str = Field(..., description="ID of originating tool call")
    success: bool = Field(..., description="Whether execution succeeded")
    output: Optional[str] = Field(default=None, description="Tool output")
    error: Optional[ToolCallError] = Field(default=None, description="Failure details")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _exactly_one_variant(self) -> "ToolCallResult":
        if self.success:
            if self.output is None or self.error is not None:
                raise ValueError("successful result needs output and no error")
        elif self.error is None or self.output is not None:
            raise ValueError("failed result needs error and no output")
        return self

    @classmethod
    def ok(cls, call_id: str, output: str) -> "ToolCallResult":
        return cls(call_id=call_id, success=True, output=output)

    @classmethod
    def failed(
        cls, call_id: str, code: ErrorCode, message: str
    ) -> "ToolCallResult":
        return cls(
            call_id=call_id,
            success=False,
            error=ToolCallError(code=code, message=message),
        )

    @property
    def content(self) -> str:
        """
        Text placed in the provider's tool-result message.

        Failures are rendered as {"error": {"code": ..., "message": ...}} so
        the model can reason about them and the conversation continues.
        """
        if self.success:
            return self.output or ""
        return json.dumps({"error": self.error.model_dump(mode="json")})


# =============================================================================
# ExecutorConfig Model
# =============================================================================


class ExecutorConfig(BaseModel):
    """
    Execution policy for a ToolExecutor.

    Supplied once at construction and immutable for the executor's lifetime.

    Attributes:
        tool_timeout_ms: Per-attempt wall-clock budget in milliseconds.
        max_retries: Attempts beyond the first for a single call.
        parallel_execution: Run a batch concurrently (True) or in order (False).
        retry_backoff_ms: Fixed delay between attempts (0 = immediate).
    """

    tool_timeout_ms: int = Field(default=30_000, gt=0)
    max_retries: int = Field(default=2, ge=0)
    parallel_execution: bool = Field(default=True)
    retry_backoff_ms: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def timeout_seconds(self) -> float:
        return self.tool_timeout_ms / 1000

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ExecutorConfig":
        """Build the executor policy from application settings."""
        return cls(
            tool_timeout_ms=settings.tool_timeout_ms,
            max_retries=settings.tool_max_retries,
            parallel_execution=settings.tool_parallel_execution,
            retry_backoff_ms=settings.tool_retry_backoff_ms,
        )


# =============================================================================
# ToolValidationReport Model
# =============================================================================


class ToolValidationReport(BaseModel):
    """
    Outcome of validating a tool set against one provider's conventions.

    Attributes:
        valid: True when no definition violated a rule.
        invalid_tools: Names of definitions with at least one violation.
        messages: One human-readable message per violation.
    """

    valid: bool
    invalid_tools: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)
