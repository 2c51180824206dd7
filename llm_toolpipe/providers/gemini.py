"""
Gemini Tool Handler

This module translates between the pipeline's provider-neutral tool models
and Google's Gemini generateContent format.

Gemini Format Notes:
- Tool definitions are grouped: [{"function_declarations": [...]}]
- Function calls arrive as functionCall parts without an id, so one is
  generated per call
- Function responses are matched by tool name, not call id

Pattern: Adapter pattern for format transformation
"""

import json
import uuid
from typing import Any, Iterable, Sequence

from llm_toolpipe.models.domain import ToolCallRequest, ToolCallResult, ToolDefinition


class GeminiToolHandler:
    """
    Handler for transforming tools between the pipeline and Gemini formats.

    Example:
        >>> handler = GeminiToolHandler()
        >>> gemini_tools = handler.transform_tools(registry.get_all_tools())
        >>> requests = handler.parse_function_calls(response["candidates"])
    """

    def transform_tool_definition(self, definition: ToolDefinition) -> dict[str, Any]:
        """
        Transform a single tool definition to a Gemini function declaration.

        Returns:
            {"name": str, "description": Optional[str], "parameters": Optional[dict]}
        """
        gemini_func: dict[str, Any] = {"name": definition.name}

        if definition.description:
            gemini_func["description"] = definition.description

        # Gemini rejects an empty properties object on parameterless functions
        if definition.parameters.get("properties"):
            gemini_func["parameters"] = definition.parameters

        return gemini_func

    def transform_tools(self, definitions: Iterable[ToolDefinition]) -> list[dict[str, Any]]:
        """
        Transform tool definitions to Gemini function declarations.

        Returns:
            Gemini tools format:
                [{"function_declarations": [...]}]
        """
        function_declarations = [self.transform_tool_definition(d) for d in definitions]
        return [{"function_declarations": function_declarations}]

    def parse_function_calls(self, candidates: list[dict[str, Any]]) -> list[ToolCallRequest]:
        """
        Parse Gemini functionCall parts into ToolCallRequests.

        Args:
            candidates: Gemini response candidates with functionCall parts.

        Returns:
            ToolCallRequests with generated call ids of the form call_<hex>.
        """
        requests: list[ToolCallRequest] = []

        for candidate in candidates:
            parts = candidate.get("content", {}).get("parts", [])
            for part in parts:
                if "functionCall" in part:
                    func_call = part["functionCall"]
                    requests.append(
                        ToolCallRequest(
                            call_id=f"call_{uuid.uuid4().hex[:24]}",
                            name=func_call.get("name", ""),
                            arguments_json=json.dumps(func_call.get("args", {})),
                        )
                    )

        return requests

    def extract_text_content(self, candidates: list[dict[str, Any]]) -> str:
        """Concatenated text parts of all candidates."""
        text_parts: list[str] = []

        for candidate in candidates:
            for part in candidate.get("content", {}).get("parts", []):
                if "text" in part:
                    text_parts.append(part["text"])

        return "".join(text_parts)

    def format_function_call(self, request: ToolCallRequest) -> dict[str, Any]:
        """Render a ToolCallRequest back into a model functionCall part."""
        arguments = request.arguments_for_echo()
        return {"functionCall": {"name": request.name, "args": arguments}}

    def format_tool_result(self, name: str, result: ToolCallResult) -> dict[str, Any]:
        """
        Format one result as a functionResponse part.

        Args:
            name: Name of the tool that produced the result.
            result: Outcome of the call.
        """
        if result.success:
            response: dict[str, Any] = {"result": result.output}
        else:
            response = {"error": result.error.model_dump(mode="json")}
        return {"functionResponse": {"name": name, "response": response}}

    def format_tool_results(
        self,
        requests: Sequence[ToolCallRequest],
        results: Sequence[ToolCallResult],
    ) -> dict[str, Any]:
        """
        Format a turn's results as one Gemini user content entry.

        Results are matched to their requests by call id, since a function
        response needs the tool name.

        Raises:
            ValueError: If a result's call id matches no request.
        """
        names = {request.call_id: request.name for request in requests}
        parts: list[dict[str, Any]] = []

        for result in results:
            if result.call_id not in names:
                raise ValueError(f"No tool call with id {result.call_id}")
            parts.append(self.format_tool_result(names[result.call_id], result))

        return {"role": "user", "parts": parts}
