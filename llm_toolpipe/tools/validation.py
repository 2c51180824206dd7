"""
Provider Tool Validation

Structural rules each provider imposes on tool definitions, and a pure
validator that reports violations without changing anything.

Acting on a report (refusing to send, stripping tools) is the provider
adapter's policy; this module only states facts. See
LLMProvider.prepare_tools for the fail-fast policy used in this package.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from llm_toolpipe.models.domain import ToolDefinition, ToolValidationReport

JSON_SCHEMA_TYPES = frozenset(
    {"string", "number", "integer", "boolean", "array", "object", "null"}
)


class ProviderId(str, Enum):
    """Providers whose tool-calling conventions are known."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROK = "grok"


@dataclass(frozen=True)
class ProviderToolRules:
    """
    Structural limits for one provider.

    Attributes:
        display_name: Name used in violation messages.
        name_pattern: Regex every tool name must fully match.
        max_name_length: Maximum tool name length.
        max_schema_depth: Maximum nesting of object/array schemas; the
            top-level parameters object counts as depth 1.
        allow_null_type: Whether "null" is accepted as a schema type.
        disallowed_keywords: Schema keywords the provider rejects.
    """

    display_name: str
    name_pattern: re.Pattern[str]
    max_name_length: int = 64
    max_schema_depth: int = 10
    allow_null_type: bool = True
    disallowed_keywords: frozenset[str] = field(default_factory=frozenset)


_OPENAI_NAME = re.compile(r"^[a-zA-Z0-9_-]+$")

PROVIDER_RULES: dict[str, ProviderToolRules] = {
    ProviderId.OPENAI.value: ProviderToolRules(
        display_name="OpenAI", name_pattern=_OPENAI_NAME
    ),
    ProviderId.GROK.value: ProviderToolRules(
        display_name="Grok", name_pattern=_OPENAI_NAME
    ),
    ProviderId.ANTHROPIC.value: ProviderToolRules(
        display_name="Anthropic", name_pattern=re.compile(r"^[a-zA-Z0-9_-]+$")
    ),
    ProviderId.GOOGLE.value: ProviderToolRules(
        display_name="Google",
        name_pattern=re.compile(r"^[a-zA-Z_][a-zA-Z0-9_.:-]*$"),
        max_schema_depth=8,
        allow_null_type=False,
        disallowed_keywords=frozenset(
            {
                "$ref",
                "$defs",
                "$schema",
                "additionalProperties",
                "oneOf",
                "allOf",
                "not",
                "patternProperties",
            }
        ),
    ),
}


def supported_providers() -> list[str]:
    """Provider ids accepted by validate_tool_definitions."""
    return list(PROVIDER_RULES)


def normalize_provider_id(provider_id: Any) -> str:
    """Lower-case provider id from a string or ProviderId member."""
    if isinstance(provider_id, Enum):
        provider_id = provider_id.value
    return str(provider_id).lower()


def validate_tool_definitions(
    definitions: Iterable[ToolDefinition], provider_id: str
) -> ToolValidationReport:
    """
    Validate tool definitions against a provider's conventions.

    Args:
        definitions: Definitions to check (not modified).
        provider_id: One of supported_providers().

    Returns:
        ToolValidationReport. An unknown provider makes every definition
        invalid, with a single message naming the provider.
    """
    definitions = list(definitions)
    rules = PROVIDER_RULES.get(normalize_provider_id(provider_id))

    if rules is None:
        return ToolValidationReport(
            valid=False,
            invalid_tools=[d.name for d in definitions],
            messages=[f"Unsupported provider: {provider_id}"],
        )

    invalid_tools: list[str] = []
    messages: list[str] = []

    for definition in definitions:
        violations = check_definition(definition, rules)
        if violations:
            invalid_tools.append(definition.name)
            messages.extend(violations)

    return ToolValidationReport(
        valid=not invalid_tools, invalid_tools=invalid_tools, messages=messages
    )


def check_definition(
    definition: ToolDefinition, rules: ProviderToolRules
) -> list[str]:
    """
    Check one definition and return its violation messages.

    Args:
        definition: The definition to check.
        rules: Provider limits to apply.

    Returns:
        Violation messages, empty when the definition is acceptable.
    """
    name = definition.name or "unnamed"
    provider = rules.display_name
    violations: list[str] = []

    # Name
    if not definition.name:
        violations.append(f"Tool '{name}' is missing required fields")
    else:
        if len(definition.name) > rules.max_name_length:
            violations.append(
                f"Tool '{name}' name exceeds {rules.max_name_length} characters "
                f"for {provider}"
            )
        if not rules.name_pattern.match(definition.name):
            violations.append(
                f"Tool '{name}' name contains characters not allowed by {provider}"
            )

    if not isinstance(definition.description, str):
        violations.append(f"Tool '{name}' description must be a string")

    # Parameters
    parameters = definition.parameters
    if not isinstance(parameters, dict):
        violations.append(f"Tool '{name}' is missing required fields")
        return violations

    if parameters.get("type") != "object":
        violations.append(
            f"Tool '{name}' parameters must have type 'object' for {provider}"
        )

    properties = parameters.get("properties", {})
    if not isinstance(properties, dict):
        violations.append(f"Tool '{name}' parameters.properties must be an object")
        properties = {}

    required = parameters.get("required", [])
    if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
        violations.append(f"Tool '{name}' parameters.required must be a list of names")
    else:
        for missing in (r for r in required if r not in properties):
            violations.append(
                f"Tool '{name}' requires undeclared parameter '{missing}'"
            )

    depth = schema_depth(parameters)
    if depth > rules.max_schema_depth:
        violations.append(
            f"Tool '{name}' schema depth {depth} exceeds {rules.max_schema_depth} "
            f"for {provider}"
        )

    violations.extend(_check_schema_node(name, "parameters", parameters, rules))
    return violations


def schema_depth(schema: Any) -> int:
    """
    Nesting depth of object/array schemas.

    A flat object schema has depth 1; each nested object property or array
    items schema adds one level.
    """
    if not isinstance(schema, dict):
        return 0

    children: list[Any] = []
    properties = schema.get("properties")
    if isinstance(properties, dict):
        children.extend(properties.values())
    items = schema.get("items")
    if isinstance(items, dict):
        children.append(items)
    elif isinstance(items, list):
        children.extend(items)

    nested = max((schema_depth(child) for child in children), default=0)
    is_container = bool(children) or schema.get("type") in ("object", "array")
    return nested + 1 if is_container else nested


def _check_schema_node(
    tool: str, path: str, node: Any, rules: ProviderToolRules
) -> list[str]:
    """Walk a schema node, reporting unknown types and disallowed keywords."""
    if not isinstance(node, dict):
        return []

    violations: list[str] = []
    provider = rules.display_name

    for keyword in sorted(rules.disallowed_keywords.intersection(node)):
        violations.append(
            f"Tool '{tool}' uses '{keyword}' at {path}, not supported by {provider}"
        )

    declared = node.get("type")
    types = declared if isinstance(declared, list) else [declared]
    for schema_type in types:
        if schema_type is None:
            continue
        if schema_type not in JSON_SCHEMA_TYPES:
            violations.append(f"Tool '{tool}' has unknown type '{schema_type}' at {path}")
        elif schema_type == "null" and not rules.allow_null_type:
            violations.append(
                f"Tool '{tool}' uses type 'null' at {path}, not supported by {provider}"
            )

    properties = node.get("properties")
    if isinstance(properties, dict):
        for prop_name, prop_schema in properties.items():
            violations.extend(
                _check_schema_node(tool, f"{path}.{prop_name}", prop_schema, rules)
            )

    items = node.get("items")
    if isinstance(items, dict):
        violations.extend(_check_schema_node(tool, f"{path}[]", items, rules))

    return violations
