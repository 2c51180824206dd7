"""
Provider Boundary Models

This module contains the provider-neutral request/response shapes exchanged
between the conversation loop and a provider adapter.

Anti-Patterns Avoided:
- Optional fields use Optional[T] with explicit None default
- Mutable defaults use default_factory
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from llm_toolpipe.models.domain import ToolCallRequest, ToolDefinition


class Usage(BaseModel):
    """
    Token usage statistics.

    Attributes:
        prompt_tokens: Number of tokens in the prompt
        completion_tokens: Number of tokens in the completion
        total_tokens: Total tokens used
    """

    prompt_tokens: int = Field(default=0, ge=0, description="Tokens in prompt")
    completion_tokens: int = Field(default=0, ge=0, description="Tokens in completion")
    total_tokens: int = Field(default=0, ge=0, description="Total tokens")


class ChatMessage(BaseModel):
    """
    A message in the conversation.

    Attributes:
        role: Message role (system, user, assistant, tool)
        content: Text content (may be empty on assistant tool-call turns)
        tool_calls: Tool calls requested by the assistant
        tool_call_id: Call being answered (tool messages only)
        name: Tool name (tool messages only; needed by some providers)
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: Optional[list[ToolCallRequest]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


class ProviderRequest(BaseModel):
    """
    Provider-neutral chat request.

    Attributes:
        messages: Conversation so far
        model: Override for the provider's default model
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate
        tools: Tool definitions offered to the model
        tool_choice: Tool selection strategy ("auto", "required", "none")
        parallel_tool_calls: Whether the model may emit several calls per turn
    """

    messages: list[ChatMessage] = Field(..., min_length=1)
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    tools: Optional[list[ToolDefinition]] = None
    tool_choice: Optional[str] = None
    parallel_tool_calls: Optional[bool] = None


class ProviderResponse(BaseModel):
    """
    Provider-neutral chat response.

    Attributes:
        content: Generated text content
        tool_calls: Normalized tool calls requested by the model
        finish_reason: Why generation stopped ("stop", "tool_calls", ...)
        usage: Token usage statistics
        max_iterations_reached: Set by the tool loop when it gave up with
            tool calls still pending
    """

    content: Optional[str] = None
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    max_iterations_reached: bool = False

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0
