"""
OpenAI Tool Handler

This module translates between the pipeline's provider-neutral tool models
and OpenAI's chat completions wire format. Grok's API is OpenAI-compatible,
so the same handler serves both providers.

OpenAI Format Notes:
- Tool definitions: {"type": "function", "function": {name, description, parameters}}
- Tool calls: tool_calls[] with function.arguments as a JSON string
- Tool results: one {"role": "tool", "tool_call_id", "content"} message per call

Pattern: Adapter pattern (minimal transformation)
"""

import json
from typing import Any, Iterable

from llm_toolpipe.models.domain import ToolCallRequest, ToolCallResult, ToolDefinition


class OpenAIToolHandler:
    """
    Handler for OpenAI tool operations.

    Pure format translation; no network calls.

    Example:
        >>> handler = OpenAIToolHandler()
        >>> payload = handler.transform_tools(registry.get_all_tools())
        >>> requests = handler.parse_tool_calls(response["choices"][0]["message"]["tool_calls"])
    """

    def transform_tool_definition(self, definition: ToolDefinition) -> dict[str, Any]:
        """
        Convert a ToolDefinition to OpenAI function-tool format.

        Args:
            definition: Provider-neutral tool definition.

        Returns:
            {"type": "function", "function": {"name", "description", "parameters"}}
        """
        return definition.to_openai_format()

    def transform_tools(self, definitions: Iterable[ToolDefinition]) -> list[dict[str, Any]]:
        return [self.transform_tool_definition(d) for d in definitions]

    def parse_tool_calls(self, tool_calls: list[dict[str, Any]]) -> list[ToolCallRequest]:
        """
        Parse tool_calls from an OpenAI response message.

        Arguments stay serialized. A provider that returns them already
        decoded gets them re-encoded, so the executor sees one shape.

        Args:
            tool_calls: The message's tool_calls array.

        Returns:
            ToolCallRequests in the order the model emitted them.
        """
        requests: list[ToolCallRequest] = []

        for call in tool_calls or []:
            function = call.get("function", {})
            arguments = function.get("arguments", "")
            if not isinstance(arguments, str):
                arguments = json.dumps(arguments)
            requests.append(
                ToolCallRequest(
                    call_id=call.get("id", ""),
                    name=function.get("name", ""),
                    arguments_json=arguments,
                )
            )

        return requests

    def format_tool_call(self, request: ToolCallRequest) -> dict[str, Any]:
        """Render a ToolCallRequest back into an assistant tool_calls entry."""
        return {
            "id": request.call_id,
            "type": "function",
            "function": {
                "name": request.name,
                "arguments": request.arguments_json,
            },
        }

    def format_tool_result(self, result: ToolCallResult) -> dict[str, Any]:
        """
        Format a tool result message for the OpenAI API.

        Failures are sent as their structured error JSON so the model can
        react to them.

        Args:
            result: Outcome of one tool call.

        Returns:
            OpenAI format tool message.
        """
        return {
            "role": "tool",
            "tool_call_id": result.call_id,
            "content": result.content,
        }

    def format_tool_results(self, results: Iterable[ToolCallResult]) -> list[dict[str, Any]]:
        """One tool message per result, in input order."""
        return [self.format_tool_result(r) for r in results]
