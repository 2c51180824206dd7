"""
Anthropic Tool Handler

This module translates between the pipeline's provider-neutral tool models
and Anthropic's Messages API format.

Anthropic Format Notes:
- Tool definitions use "input_schema" instead of "parameters"
- Tool use response: content blocks with type="tool_use" and a decoded "input"
- Tool result: role="user" message holding type="tool_result" blocks
- Every tool result of a turn goes into a single user message

Pattern: Adapter pattern for format transformation
"""

import json
from typing import Any, Iterable

from llm_toolpipe.models.domain import ToolCallRequest, ToolCallResult, ToolDefinition


class AnthropicToolHandler:
    """
    Handler for transforming tools between the pipeline and Anthropic formats.

    This class provides methods to:
    - Transform tool definitions to Anthropic format
    - Parse Anthropic tool_use responses into ToolCallRequests
    - Format tool results for the Anthropic API

    Example:
        >>> handler = AnthropicToolHandler()
        >>> anthropic_tools = handler.transform_tools(registry.get_all_tools())
        >>> requests = handler.parse_tool_use_response(response["content"])
        >>> message = handler.format_tool_results(results)
    """

    # =========================================================================
    # Tool Definition Transformation
    # =========================================================================

    def transform_tool_definition(self, definition: ToolDefinition) -> dict[str, Any]:
        """
        Transform a single tool definition to Anthropic format.

        Args:
            definition: Provider-neutral tool definition.

        Returns:
            Anthropic format tool definition:
                {
                    "name": str,
                    "description": Optional[str],
                    "input_schema": dict
                }
        """
        input_schema = dict(definition.parameters)
        input_schema.setdefault("type", "object")
        input_schema.setdefault("properties", {})

        anthropic_tool: dict[str, Any] = {
            "name": definition.name,
            "input_schema": input_schema,
        }
        if definition.description:
            anthropic_tool["description"] = definition.description

        return anthropic_tool

    def transform_tools(self, definitions: Iterable[ToolDefinition]) -> list[dict[str, Any]]:
        return [self.transform_tool_definition(d) for d in definitions]

    # =========================================================================
    # Tool Use Response Parsing
    # =========================================================================

    def parse_tool_use_response(
        self, content_blocks: list[dict[str, Any]]
    ) -> list[ToolCallRequest]:
        """
        Parse Anthropic tool_use content blocks into ToolCallRequests.

        Args:
            content_blocks: Anthropic response content array with structure:
                [
                    {"type": "text", "text": str},
                    {
                        "type": "tool_use",
                        "id": str,
                        "name": str,
                        "input": dict
                    }
                ]

        Returns:
            ToolCallRequests with the input re-serialized as JSON.
        """
        requests: list[ToolCallRequest] = []

        for block in content_blocks:
            if block.get("type") == "tool_use":
                requests.append(
                    ToolCallRequest(
                        call_id=block.get("id", ""),
                        name=block.get("name", ""),
                        arguments_json=json.dumps(block.get("input", {})),
                    )
                )

        return requests

    def extract_text_content(self, content_blocks: list[dict[str, Any]]) -> str:
        """
        Extract text content from Anthropic content blocks.

        Returns:
            Text blocks joined by a space, or "" when there are none.
        """
        text_parts: list[str] = []

        for block in content_blocks:
            if block.get("type") == "text":
                text = block.get("text", "")
                if text:
                    text_parts.append(text)

        return " ".join(text_parts)

    def format_tool_use(self, request: ToolCallRequest) -> dict[str, Any]:
        """Render a ToolCallRequest back into an assistant tool_use block."""
        arguments = request.arguments_for_echo()
        return {
            "type": "tool_use",
            "id": request.call_id,
            "name": request.name,
            "input": arguments,
        }

    # =========================================================================
    # Tool Result Message Formatting
    # =========================================================================

    def format_tool_result(self, result: ToolCallResult) -> dict[str, Any]:
        """
        Format a single tool result content block.

        Args:
            result: Outcome of one tool call.

        Returns:
            Anthropic tool_result content block:
                {
                    "type": "tool_result",
                    "tool_use_id": str,
                    "content": str,
                    "is_error": True   # failures only
                }
        """
        block: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": result.call_id,
            "content": result.content,
        }

        if not result.success:
            block["is_error"] = True

        return block

    def format_tool_results(self, results: Iterable[ToolCallResult]) -> dict[str, Any]:
        """
        Format a turn's results as one Anthropic user message.

        Note: Anthropic expects all tool results in a single user message.
        """
        return {
            "role": "user",
            "content": [self.format_tool_result(r) for r in results],
        }
