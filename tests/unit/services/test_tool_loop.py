"""
Tests for ToolCallLoop and the settings-driven factories.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from llm_toolpipe.core.config import Settings
from llm_toolpipe.core.exceptions import ProviderError, ToolValidationError
from llm_toolpipe.models.domain import (
    ExecutorConfig,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
)
from llm_toolpipe.models.provider import ChatMessage, ProviderRequest, ProviderResponse
from llm_toolpipe.providers import FakeProvider
from llm_toolpipe.services import (
    ToolCallLoop,
    create_tool_executor,
    create_tool_loop,
    create_tool_registry,
)
from llm_toolpipe.tools.executor import ToolExecutor
from llm_toolpipe.tools.registry import ToolRegistry


def user_request(text: str = "Say hi") -> ProviderRequest:
    return ProviderRequest(messages=[ChatMessage(role="user", content=text)])


def tool_turn(*calls: ToolCallRequest) -> ProviderResponse:
    return ProviderResponse(tool_calls=list(calls), finish_reason="tool_calls")


@pytest.fixture
def executor(registry: ToolRegistry, echo_impl, mock_logger: MagicMock) -> ToolExecutor:
    return ToolExecutor(registry, {"echo": echo_impl}, mock_logger, ExecutorConfig(max_retries=0))


# =============================================================================
# ToolCallLoop
# =============================================================================


class TestToolCallLoop:
    @pytest.mark.asyncio
    async def test_no_tool_calls_single_turn(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        provider = FakeProvider(responses=[ProviderResponse(content="hi", finish_reason="stop")])
        loop = ToolCallLoop(provider, registry, executor, logger=mock_logger)

        response = await loop.run(user_request())

        assert response.content == "hi"
        assert response.max_iterations_reached is False
        assert len(provider.chat_calls) == 1
        assert [t.name for t in provider.chat_calls[0].tools] == ["echo"]

    @pytest.mark.asyncio
    async def test_tool_results_fed_back(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        provider = FakeProvider(
            responses=[
                tool_turn(
                    ToolCallRequest(call_id="c1", name="echo", arguments_json='{"text": "hi"}'),
                    ToolCallRequest(call_id="c2", name="nope"),
                ),
                ProviderResponse(content="done", finish_reason="stop"),
            ]
        )
        loop = ToolCallLoop(provider, registry, executor, logger=mock_logger)

        response = await loop.run(user_request())

        assert response.content == "done"
        second = provider.chat_calls[1].messages
        assert [m.role for m in second] == ["user", "assistant", "tool", "tool"]
        assert [c.call_id for c in second[1].tool_calls] == ["c1", "c2"]
        assert (second[2].tool_call_id, second[2].name, second[2].content) == ("c1", "echo", "hi")
        assert second[3].tool_call_id == "c2"
        assert json.loads(second[3].content)["error"]["code"] == "tool_not_found"

    @pytest.mark.asyncio
    async def test_original_request_not_mutated(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        provider = FakeProvider(
            responses=[tool_turn(ToolCallRequest(call_id="c1", name="echo", arguments_json='{"text": "x"}'))]
        )
        request = user_request()

        await ToolCallLoop(provider, registry, executor, logger=mock_logger).run(request)

        assert len(request.messages) == 1
        assert request.tools is None

    @pytest.mark.asyncio
    async def test_max_iterations_reached(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        looping = [
            tool_turn(ToolCallRequest(call_id=f"c{i}", name="echo", arguments_json='{"text": "again"}'))
            for i in range(5)
        ]
        provider = FakeProvider(responses=looping)
        loop = ToolCallLoop(provider, registry, executor, max_iterations=2, logger=mock_logger)

        response = await loop.run(user_request())

        assert response.max_iterations_reached is True
        assert response.has_tool_calls
        assert len(provider.chat_calls) == 3
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_executor_receives_calls_in_order(
        self, registry: ToolRegistry, mock_logger: MagicMock
    ) -> None:
        executor = MagicMock(spec=ToolExecutor)
        executor.execute_tool_calls = AsyncMock(
            return_value=[ToolCallResult.ok("a", "1"), ToolCallResult.ok("b", "2")]
        )
        calls = [ToolCallRequest(call_id="a", name="echo"), ToolCallRequest(call_id="b", name="echo")]
        provider = FakeProvider(responses=[tool_turn(*calls)])

        await ToolCallLoop(provider, registry, executor, logger=mock_logger).run(user_request())

        executor.execute_tool_calls.assert_awaited_once_with(calls)

    @pytest.mark.asyncio
    async def test_incompatible_tools_refused_before_chat(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        registry.register_tool(ToolDefinition(name="bad name"))
        provider = FakeProvider(provider_id="anthropic")

        with pytest.raises(ToolValidationError):
            await ToolCallLoop(provider, registry, executor, logger=mock_logger).run(user_request())

        assert provider.chat_calls == []

    @pytest.mark.asyncio
    async def test_empty_registry_keeps_request_tools(
        self, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        provider = FakeProvider()
        request = user_request().model_copy(update={"tools": [ToolDefinition(name="inline")]})

        await ToolCallLoop(provider, ToolRegistry(mock_logger), executor, logger=mock_logger).run(request)

        assert [t.name for t in provider.chat_calls[0].tools] == ["inline"]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        provider = FakeProvider(error_on_chat=ProviderError("down", provider="openai"))

        with pytest.raises(ProviderError):
            await ToolCallLoop(provider, registry, executor, logger=mock_logger).run(user_request())

    def test_max_iterations_must_be_positive(
        self, registry: ToolRegistry, executor: ToolExecutor
    ) -> None:
        with pytest.raises(ValueError):
            ToolCallLoop(FakeProvider(), registry, executor, max_iterations=0)


# =============================================================================
# Factories
# =============================================================================


class TestFactories:
    def test_registry_preloads_definitions(self, tmp_path: Path, mock_logger: MagicMock) -> None:
        path = tmp_path / "tools.json"
        path.write_text(json.dumps({"tools": [{"name": "ns.lookup"}, {"name": "ping"}]}))
        settings = Settings(tool_definitions_path=str(path), default_provider="openai")

        registry = create_tool_registry(settings, mock_logger)

        assert len(registry) == 2
        warnings = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert any("ns.lookup" in w for w in warnings)

    def test_registry_without_path(self, mock_logger: MagicMock) -> None:
        assert len(create_tool_registry(Settings(), mock_logger)) == 0

    def test_executor_policy_from_settings(
        self, registry: ToolRegistry, echo_impl, mock_logger: MagicMock
    ) -> None:
        settings = Settings(tool_timeout_ms=1500, tool_max_retries=0, tool_parallel_execution=False)

        executor = create_tool_executor(registry, {"echo": echo_impl}, settings, mock_logger)

        assert executor.config == ExecutorConfig(
            tool_timeout_ms=1500, max_retries=0, parallel_execution=False
        )
        assert executor.has_tool_implementation("echo")

    @pytest.mark.asyncio
    async def test_loop_iterations_from_settings(
        self, registry: ToolRegistry, executor: ToolExecutor, mock_logger: MagicMock
    ) -> None:
        provider = FakeProvider(
            responses=[
                tool_turn(ToolCallRequest(call_id=f"c{i}", name="echo", arguments_json='{"text": "x"}'))
                for i in range(3)
            ]
        )
        loop = create_tool_loop(
            provider, registry, executor, Settings(max_tool_iterations=1), mock_logger
        )

        response = await loop.run(user_request())

        assert response.max_iterations_reached is True
        assert len(provider.chat_calls) == 2
