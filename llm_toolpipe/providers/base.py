"""
Provider Base Interface

This module defines the abstract base class for LLM provider adapters used
by the tool call loop.

Design Pattern:
- Ports and Adapters (Hexagonal Architecture)
- LLMProvider serves as the "port" (interface)
- Concrete providers and FakeProvider serve as "adapters"

Adapters own the network call. The tool-related obligation shared by all of
them lives here: definitions are validated against the provider's
conventions before they are sent, and an incompatible tool set is refused
rather than silently stripped.
"""

from abc import ABC, abstractmethod

from llm_toolpipe.core.exceptions import ToolValidationError
from llm_toolpipe.models.domain import ToolDefinition
from llm_toolpipe.models.provider import ProviderRequest, ProviderResponse
from llm_toolpipe.tools.registry import ToolRegistry


class LLMProvider(ABC):
    """
    Abstract base class for LLM provider adapters.

    Attributes:
        provider_id: Provider key used for tool validation
            ("openai", "anthropic", "google" or "grok").

    Example:
        >>> class OpenAIProvider(LLMProvider):
        ...     provider_id = "openai"
        ...
        ...     async def chat(self, request: ProviderRequest) -> ProviderResponse:
        ...         payload = OpenAIToolHandler().transform_tools(request.tools or [])
        ...         ...
    """

    provider_id: str

    @abstractmethod
    async def chat(self, request: ProviderRequest) -> ProviderResponse:
        """
        Send one chat turn to the provider.

        Args:
            request: Conversation so far, plus the tools offered to the model.

        Returns:
            ProviderResponse with text content and normalized tool calls.

        Raises:
            ProviderError: If the provider API returns an error.
        """
        ...

    def prepare_tools(self, registry: ToolRegistry) -> list[ToolDefinition]:
        """
        Validate the registry's definitions for this provider.

        Args:
            registry: Registry whose tools will be offered to the model.

        Returns:
            The definitions, unchanged, when all of them are acceptable.

        Raises:
            ToolValidationError: If any definition violates the provider's
                conventions. Nothing is sent in that case.
        """
        report = registry.validate_tools_for_provider(self.provider_id)
        if not report.valid:
            raise ToolValidationError(
                f"{len(report.invalid_tools)} tool definition(s) rejected for "
                f"provider {self.provider_id}: {', '.join(report.invalid_tools)}",
                provider=self.provider_id,
                invalid_tools=report.invalid_tools,
                messages=report.messages,
            )
        return registry.get_all_tools()
