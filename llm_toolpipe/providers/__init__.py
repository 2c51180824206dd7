"""
Providers Package - LLM Provider Boundary

This package contains the abstract provider interface, the per-provider
tool format handlers, and a scripted FakeProvider for tests.
"""

from typing import Union

from llm_toolpipe.providers.anthropic import AnthropicToolHandler
from llm_toolpipe.providers.base import LLMProvider
from llm_toolpipe.providers.fake import FakeProvider
from llm_toolpipe.providers.gemini import GeminiToolHandler
from llm_toolpipe.providers.openai import OpenAIToolHandler
from llm_toolpipe.tools.validation import ProviderId, normalize_provider_id

ToolHandler = Union[OpenAIToolHandler, AnthropicToolHandler, GeminiToolHandler]

_HANDLERS: dict[str, type] = {
    ProviderId.OPENAI.value: OpenAIToolHandler,
    ProviderId.GROK.value: OpenAIToolHandler,
    ProviderId.ANTHROPIC.value: AnthropicToolHandler,
    ProviderId.GOOGLE.value: GeminiToolHandler,
}


def get_tool_handler(provider_id: Union[str, ProviderId]) -> ToolHandler:
    """
    Get the tool format handler for a provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    handler_cls = _HANDLERS.get(normalize_provider_id(provider_id))
    if handler_cls is None:
        raise ValueError(f"Unsupported provider: {provider_id}")
    return handler_cls()


__all__ = [
    "LLMProvider",
    "FakeProvider",
    "AnthropicToolHandler",
    "GeminiToolHandler",
    "OpenAIToolHandler",
    "ToolHandler",
    "get_tool_handler",
]
