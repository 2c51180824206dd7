"""
Pytest configuration for the test suite.

This configuration sets up:
- Test markers for categorization
- Shared fixtures: a mock logger, a registry with an echo tool, and an
  executor policy with short timeouts so failure paths run quickly
"""

from typing import Any
from unittest.mock import MagicMock

import pytest

from llm_toolpipe.core.config import get_settings
from llm_toolpipe.models.domain import ExecutorConfig, ToolDefinition
from llm_toolpipe.tools.registry import ToolRegistry


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: tests for individual components
    - integration: tests for the full registry -> executor -> provider loop
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for the tool pipeline")


# =============================================================================
# Settings Cache
# =============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make sure environment changes in one test never leak into another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Logger Fixture
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger test double satisfying the ToolLogger protocol."""
    return MagicMock()


# =============================================================================
# Tool Fixtures
# =============================================================================


@pytest.fixture
def echo_definition() -> ToolDefinition:
    """The echo tool: returns its 'text' argument."""
    return ToolDefinition(
        name="echo",
        description="Echo the given text",
        parameters={
            "type": "object",
            "properties": {"text": {"type": "string", "description": "Text to echo"}},
            "required": ["text"],
        },
    )


@pytest.fixture
def echo_impl():
    """Sync implementation of the echo tool."""

    def echo(args: dict[str, Any]) -> str:
        return args["text"]

    return echo


@pytest.fixture
def registry(mock_logger: MagicMock, echo_definition: ToolDefinition) -> ToolRegistry:
    """Registry holding the echo tool."""
    reg = ToolRegistry(mock_logger)
    reg.register_tool(echo_definition)
    return reg


@pytest.fixture
def fast_config() -> ExecutorConfig:
    """Executor policy with a short timeout for failure-path tests."""
    return ExecutorConfig(tool_timeout_ms=200, max_retries=2, parallel_execution=True)
