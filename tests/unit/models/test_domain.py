"""
Unit tests for llm_toolpipe/models/domain.py and models/provider.py.
"""

import json

import pytest
from pydantic import ValidationError

from llm_toolpipe.core.exceptions import ErrorCode
from llm_toolpipe.models.domain import (
    ExecutorConfig,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
)
from llm_toolpipe.models.provider import ChatMessage, ProviderRequest, ProviderResponse


class TestToolDefinition:
    def test_defaults(self) -> None:
        tool = ToolDefinition(name="ping")

        assert tool.description == ""
        assert tool.parameters == {"type": "object", "properties": {}}
        assert tool.required_arguments == []

    def test_default_parameters_not_shared(self) -> None:
        a = ToolDefinition(name="a")
        b = ToolDefinition(name="b")

        assert a.parameters is not b.parameters

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            ToolDefinition(name="")

    def test_frozen(self) -> None:
        tool = ToolDefinition(name="ping")

        with pytest.raises(ValidationError):
            tool.name = "pong"  # type: ignore[misc]

    def test_required_arguments(self, echo_definition: ToolDefinition) -> None:
        assert echo_definition.required_arguments == ["text"]

    def test_to_openai_format(self, echo_definition: ToolDefinition) -> None:
        formatted = echo_definition.to_openai_format()

        assert formatted["type"] == "function"
        assert formatted["function"]["name"] == "echo"
        assert formatted["function"]["parameters"]["required"] == ["text"]


class TestToolCallRequest:
    def test_default_arguments(self) -> None:
        assert ToolCallRequest(call_id="c1", name="ping").arguments_json == "{}"

    def test_from_arguments(self) -> None:
        request = ToolCallRequest.from_arguments("c1", "echo", {"text": "hi"})

        assert json.loads(request.arguments_json) == {"text": "hi"}

    def test_arguments_for_echo(self) -> None:
        assert ToolCallRequest(call_id="c1", name="e", arguments_json='{"a": 1}').arguments_for_echo() == {"a": 1}
        assert ToolCallRequest(call_id="c1", name="e", arguments_json=" ").arguments_for_echo() == {}
        assert ToolCallRequest(call_id="c1", name="e", arguments_json="{bad").arguments_for_echo() == {
            "_raw": "{bad"
        }


class TestToolCallResult:
    def test_ok(self) -> None:
        result = ToolCallResult.ok("c1", "42")

        assert result.success is True
        assert result.output == "42"
        assert result.error is None
        assert result.content == "42"

    def test_failed(self) -> None:
        result = ToolCallResult.failed("c1", ErrorCode.EXECUTION_ERROR, "boom")

        assert result.success is False
        assert result.output is None
        assert result.error.code == ErrorCode.EXECUTION_ERROR
        assert json.loads(result.content) == {
            "error": {"code": "execution_error", "message": "boom"}
        }

    def test_empty_output_is_still_success(self) -> None:
        result = ToolCallResult.ok("c1", "")

        assert result.success is True
        assert result.content == ""

    @pytest.mark.parametrize(
        "fields",
        [
            {"success": True},
            {"success": True, "output": "x", "error": {"code": "execution_error", "message": "m"}},
            {"success": False},
            {"success": False, "output": "x", "error": {"code": "execution_error", "message": "m"}},
        ],
    )
    def test_exactly_one_variant(self, fields: dict) -> None:
        with pytest.raises(ValidationError):
            ToolCallResult(call_id="c1", **fields)


class TestExecutorConfig:
    def test_defaults(self) -> None:
        config = ExecutorConfig()

        assert config.tool_timeout_ms == 30_000
        assert config.max_retries == 2
        assert config.parallel_execution is True
        assert config.retry_backoff_ms == 0
        assert config.max_attempts == 3
        assert config.timeout_seconds == 30.0

    @pytest.mark.parametrize(
        "fields", [{"tool_timeout_ms": 0}, {"max_retries": -1}, {"retry_backoff_ms": -5}]
    )
    def test_rejects_invalid_values(self, fields: dict) -> None:
        with pytest.raises(ValidationError):
            ExecutorConfig(**fields)


class TestProviderModels:
    def test_request_requires_messages(self) -> None:
        with pytest.raises(ValidationError):
            ProviderRequest(messages=[])

    def test_response_has_tool_calls(self) -> None:
        assert ProviderResponse(content="hi").has_tool_calls is False
        assert ProviderResponse(
            tool_calls=[ToolCallRequest(call_id="c1", name="echo")]
        ).has_tool_calls is True

    def test_tool_message(self) -> None:
        message = ChatMessage(role="tool", content="42", tool_call_id="c1", name="add")

        assert message.tool_call_id == "c1"

    def test_invalid_role(self) -> None:
        with pytest.raises(ValidationError):
            ChatMessage(role="robot", content="beep")  # type: ignore[arg-type]
