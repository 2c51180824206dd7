"""
Pipeline Factories

Factory functions that wire registry, executor and tool loop from Settings.
Each factory takes its collaborators explicitly, so tests can pass their own
settings, loggers or providers instead of patching globals.
"""

from collections.abc import Mapping
from typing import Optional

from llm_toolpipe.core.config import Settings, get_settings
from llm_toolpipe.models.domain import ExecutorConfig
from llm_toolpipe.observability.logging import ToolLogger, get_logger
from llm_toolpipe.providers.base import LLMProvider
from llm_toolpipe.services.tool_loop import ToolCallLoop
from llm_toolpipe.tools.executor import ToolExecutor, ToolImplementation
from llm_toolpipe.tools.registry import ToolRegistry


def create_tool_registry(
    settings: Optional[Settings] = None,
    logger: Optional[ToolLogger] = None,
) -> ToolRegistry:
    """
    Build a registry, preloading tool_definitions_path when configured.

    Preloaded definitions are checked against the default provider; a
    mismatch is logged, not raised, since the provider actually used is
    chosen later.
    """
    settings = settings or get_settings()
    logger = logger or get_logger(__name__, level=settings.log_level)
    registry = ToolRegistry(logger)

    if settings.tool_definitions_path:
        registry.load_from_file(settings.tool_definitions_path)
        report = registry.validate_tools_for_provider(settings.default_provider)
        for message in report.messages:
            logger.warning(message)

    return registry


def create_tool_executor(
    registry: ToolRegistry,
    implementations: Optional[Mapping[str, ToolImplementation]] = None,
    settings: Optional[Settings] = None,
    logger: Optional[ToolLogger] = None,
) -> ToolExecutor:
    """Build an executor whose policy comes from settings."""
    settings = settings or get_settings()
    return ToolExecutor(
        registry,
        implementations,
        logger or get_logger(__name__, level=settings.log_level),
        ExecutorConfig.from_settings(settings),
    )


def create_tool_loop(
    provider: LLMProvider,
    registry: ToolRegistry,
    executor: ToolExecutor,
    settings: Optional[Settings] = None,
    logger: Optional[ToolLogger] = None,
) -> ToolCallLoop:
    """Build a tool call loop bounded by settings.max_tool_iterations."""
    settings = settings or get_settings()
    return ToolCallLoop(
        provider,
        registry,
        executor,
        max_iterations=settings.max_tool_iterations,
        logger=logger,
    )
