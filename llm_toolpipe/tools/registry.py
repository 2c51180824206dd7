"""
Tool Registry

This module implements the registry of declarable tools: the authoritative,
provider-agnostic catalog of ToolDefinitions offered to a model.

Pattern: Service Registry (tool inventory)
Pattern: Dependency Injection (logger is a constructor argument)

The registry holds definitions only. Implementations are bound on the
ToolExecutor, so a tool can be declared without being executable.

Failure semantics:
- Duplicate registration is not an error: register_tool returns False and
  logs a warning.
- Looking up a missing name returns None.
- A structurally corrupt definition raises ToolDefinitionError, since it is
  a programming error in the host.
"""

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from llm_toolpipe.core.exceptions import ToolDefinitionError
from llm_toolpipe.models.domain import ToolDefinition, ToolValidationReport
from llm_toolpipe.observability.logging import ToolLogger, get_logger
from llm_toolpipe.tools.validation import validate_tool_definitions

DefinitionLike = Union[ToolDefinition, Mapping[str, Any]]


class ToolRegistry:
    """
    Registry for managing tool definitions.

    Definitions are keyed by name and listed in insertion order.

    Attributes:
        _tools: Dictionary mapping tool names to ToolDefinition instances.
        _logger: Injected logger.

    Example:
        >>> registry = ToolRegistry(logger)
        >>> registry.register_tool(read_file_definition)
        True
        >>> registry.register_tool(read_file_definition)
        False
        >>> registry.get_tool("read_file").description
        'Read a file relative to the workspace'
    """

    def __init__(self, logger: Optional[ToolLogger] = None) -> None:
        """
        Initialize an empty registry.

        Args:
            logger: Logger for registration events (default: structlog logger).
        """
        self._tools: dict[str, ToolDefinition] = {}
        self._logger = logger or get_logger(__name__)
        self._logger.debug("ToolRegistry initialized")

    # =========================================================================
    # Registration
    # =========================================================================

    def register_tool(self, definition: DefinitionLike) -> bool:
        """
        Register a tool definition.

        Args:
            definition: A ToolDefinition, or a mapping with name/description/
                parameters keys (an OpenAI-style {"type": "function",
                "function": {...}} mapping is unwrapped).

        Returns:
            True if registered, False if a tool with the same name exists.

        Raises:
            ToolDefinitionError: If the definition is structurally corrupt.
        """
        tool = self._coerce(definition)

        if tool.name in self._tools:
            self._logger.warning(f"Tool with name '{tool.name}' already exists in registry")
            return False

        self._tools[tool.name] = tool
        self._logger.debug(f"Registered tool '{tool.name}'")
        return True

    def register_tools(self, definitions: Iterable[DefinitionLike]) -> int:
        """
        Register multiple tool definitions.

        A duplicate or corrupt definition does not stop the remaining ones
        from being registered; corrupt ones are logged and skipped.

        Args:
            definitions: The definitions to register.

        Returns:
            The number of tools actually inserted.
        """
        definitions = list(definitions)
        success_count = 0

        for definition in definitions:
            try:
                if self.register_tool(definition):
                    success_count += 1
            except ToolDefinitionError as e:
                self._logger.error(f"Skipping invalid tool definition: {e.message}")

        self._logger.debug(f"Registered {success_count}/{len(definitions)} tools")
        return success_count

    def _coerce(self, definition: DefinitionLike) -> ToolDefinition:
        """Turn a definition-like value into a ToolDefinition or fail fast."""
        if isinstance(definition, ToolDefinition):
            tool = definition
        elif isinstance(definition, Mapping):
            data = dict(definition)
            if data.get("type") == "function" and isinstance(data.get("function"), Mapping):
                data = dict(data["function"])
            try:
                tool = ToolDefinition.model_validate(data)
            except ValidationError as e:
                first = e.errors()[0]
                field = str(first["loc"][0]) if first.get("loc") else None
                raise ToolDefinitionError(
                    f"Invalid tool definition ({field}): {first['msg']}", field=field
                ) from e
        else:
            raise ToolDefinitionError(
                f"Tool definition must be a ToolDefinition or mapping, "
                f"got {type(definition).__name__}"
            )

        if not isinstance(tool.name, str) or not tool.name.strip():
            raise ToolDefinitionError("Tool definition has no name", field="name")
        if not isinstance(tool.parameters, dict):
            raise ToolDefinitionError(
                f"Tool '{tool.name}' parameters must be an object", field="parameters"
            )
        return tool

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """
        Get a tool definition by name.

        Returns:
            The ToolDefinition, or None if not registered.
        """
        return self._tools.get(name)

    def get_all_tools(self) -> list[ToolDefinition]:
        """All registered definitions, in insertion order."""
        return list(self._tools.values())

    def get_tools(
        self, predicate: Optional[Callable[[ToolDefinition], bool]] = None
    ) -> list[ToolDefinition]:
        """
        Registered definitions matching a predicate.

        Args:
            predicate: Filter applied to each definition; None returns all.
        """
        tools = self.get_all_tools()
        if predicate is None:
            return tools
        return [tool for tool in tools if predicate(tool)]

    def has(self, name: str) -> bool:
        return name in self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    # =========================================================================
    # Provider Validation
    # =========================================================================

    def validate_tools_for_provider(self, provider_id: str) -> ToolValidationReport:
        """
        Validate every registered definition against a provider's rules.

        The registry is not modified. Provider adapters must call this before
        sending definitions and refuse to proceed when the report is invalid.

        Args:
            provider_id: "openai", "anthropic", "google" or "grok".

        Returns:
            ToolValidationReport with valid flag, invalid names and messages.
        """
        report = validate_tool_definitions(self.get_all_tools(), provider_id)
        if not report.valid:
            self._logger.debug(
                f"{len(report.invalid_tools)} tool(s) invalid for provider {provider_id}"
            )
        return report

    # =========================================================================
    # Load from config file
    # =========================================================================

    def load_from_file(self, filepath: Union[str, Path]) -> int:
        """
        Load tool definitions from a JSON config file.

        The config file should have the format:
        {
            "tools": [
                {
                    "name": "tool_name",
                    "description": "Tool description",
                    "parameters": { ... JSON Schema ... }
                }
            ]
        }

        Args:
            filepath: Path to the JSON config file.

        Returns:
            Number of definitions registered (0 if the file does not exist).
        """
        path = Path(filepath)
        if not path.exists():
            self._logger.warning(f"Tool config file not found: {filepath}")
            return 0

        with open(path) as f:
            config = json.load(f)

        tools = config.get("tools", [])
        count = self.register_tools(tools)
        self._logger.info(f"Loaded {count} tool definitions from {filepath}")
        return count
