"""
Fake LLM Provider - Test Double Implementation

This module provides a FakeProvider that implements the real LLMProvider
interface without making network calls.

This is NOT mocking - it's a proper implementation of the interface for
testing. The FakeProvider can also be used for:
- Local development without API keys
- Integration testing of the tool call loop without network calls
"""

from typing import Optional, Sequence

from llm_toolpipe.models.provider import ProviderRequest, ProviderResponse, Usage
from llm_toolpipe.providers.base import LLMProvider


class FakeProvider(LLMProvider):
    """
    Fake LLM provider driven by a script of responses.

    Each chat() call returns the next scripted response. Once the script is
    exhausted, a plain "stop" response with response_content is returned.

    Attributes:
        provider_id: Provider whose tool rules apply (default: "openai").
        responses: Remaining scripted responses.
        response_content: Content of the fallback response.
        error_on_chat: Optional exception to raise on chat() calls.
        chat_calls: Requests received, for test assertions.

    Example:
        >>> provider = FakeProvider(responses=[
        ...     ProviderResponse(tool_calls=[call], finish_reason="tool_calls"),
        ...     ProviderResponse(content="done", finish_reason="stop"),
        ... ])
        >>> response = await provider.chat(request)
    """

    def __init__(
        self,
        provider_id: str = "openai",
        responses: Optional[Sequence[ProviderResponse]] = None,
        response_content: str = "Fake response for testing",
        error_on_chat: Optional[Exception] = None,
    ) -> None:
        self.provider_id = provider_id
        self.responses: list[ProviderResponse] = list(responses or [])
        self.response_content = response_content
        self.error_on_chat = error_on_chat

        # Track calls for test assertions
        self.chat_calls: list[ProviderRequest] = []

    async def chat(self, request: ProviderRequest) -> ProviderResponse:
        """
        Return the next scripted response.

        Raises:
            Exception: If error_on_chat was set during initialization.
        """
        self.chat_calls.append(request)

        if self.error_on_chat is not None:
            raise self.error_on_chat

        if self.responses:
            return self.responses.pop(0)

        prompt_tokens = sum(len(msg.content.split()) for msg in request.messages) * 2
        completion_tokens = len(self.response_content.split()) * 2
        return ProviderResponse(
            content=self.response_content,
            finish_reason="stop",
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )
