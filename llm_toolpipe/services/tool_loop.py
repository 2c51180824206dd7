"""
Tool Call Loop

This module drives a conversation through repeated model turns: offer the
registry's tools, execute whatever tool calls the model emits, feed the
results back, and stop when the model answers without tool calls or the
iteration budget runs out.

Pattern: Service Layer (orchestrates provider and executor)
Pattern: Dependency Injection (provider, registry, executor, logger)

Tool failures never abort the loop: they come back from the executor as
failed ToolCallResults and are sent to the model as error content. Provider
errors propagate to the caller.
"""

from typing import Optional

from llm_toolpipe.models.domain import ToolCallResult
from llm_toolpipe.models.provider import ChatMessage, ProviderRequest, ProviderResponse
from llm_toolpipe.observability.logging import ToolLogger, get_logger
from llm_toolpipe.providers.base import LLMProvider
from llm_toolpipe.tools.executor import ToolExecutor
from llm_toolpipe.tools.registry import ToolRegistry

# Default maximum tool call iterations to prevent infinite loops
DEFAULT_MAX_TOOL_ITERATIONS = 10


class ToolCallLoop:
    """
    Multi-turn tool calling against a single provider.

    Attributes:
        _provider: Provider adapter for model turns.
        _registry: Registry whose tools are offered to the model.
        _executor: Executor that runs the model's tool calls.
        _max_iterations: Maximum number of tool-executing rounds.

    Example:
        >>> loop = ToolCallLoop(provider, registry, executor, max_iterations=5)
        >>> response = await loop.run(
        ...     ProviderRequest(messages=[ChatMessage(role="user", content="Hi")])
        ... )
    """

    def __init__(
        self,
        provider: LLMProvider,
        registry: ToolRegistry,
        executor: ToolExecutor,
        max_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS,
        logger: Optional[ToolLogger] = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self._provider = provider
        self._registry = registry
        self._executor = executor
        self._max_iterations = max_iterations
        self._logger = logger or get_logger(__name__)

    async def run(self, request: ProviderRequest) -> ProviderResponse:
        """
        Run the conversation until the model stops calling tools.

        Args:
            request: Initial request. Its tools are replaced by the
                registry's validated definitions when the registry is not
                empty.

        Returns:
            The last provider response. max_iterations_reached is set when
            the budget ran out with tool calls still pending.

        Raises:
            ToolValidationError: If the registry's tools are incompatible
                with the provider.
            ProviderError: If the provider call fails.
        """
        tools = self._provider.prepare_tools(self._registry) if len(self._registry) else None
        messages = list(request.messages)
        working_request = request.model_copy(update={"tools": tools or request.tools})

        response = await self._provider.chat(working_request)

        iteration = 0
        while response.has_tool_calls and iteration < self._max_iterations:
            iteration += 1
            self._logger.debug(
                f"Tool iteration {iteration}/{self._max_iterations}: "
                f"{len(response.tool_calls)} tool call(s)"
            )

            results = await self._executor.execute_tool_calls(response.tool_calls)
            messages.append(
                ChatMessage(
                    role="assistant",
                    content=response.content or "",
                    tool_calls=list(response.tool_calls),
                )
            )
            messages.extend(self._build_tool_messages(response, results))

            working_request = working_request.model_copy(update={"messages": list(messages)})
            response = await self._provider.chat(working_request)

        if response.has_tool_calls:
            self._logger.warning(
                f"Reached max tool iterations ({self._max_iterations}) with "
                f"{len(response.tool_calls)} tool call(s) pending"
            )
            return response.model_copy(update={"max_iterations_reached": True})

        return response

    def _build_tool_messages(
        self, response: ProviderResponse, results: list[ToolCallResult]
    ) -> list[ChatMessage]:
        """One tool message per result, paired with its request by position."""
        return [
            ChatMessage(
                role="tool",
                content=result.content,
                tool_call_id=result.call_id,
                name=call.name,
            )
            for call, result in zip(response.tool_calls, results)
        ]
