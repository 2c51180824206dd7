"""
Core configuration module for the tool pipeline.

This module provides centralized configuration management using Pydantic
Settings. All configuration is loaded from environment variables with the
LLM_TOOLPIPE_ prefix.

Executor settings are read once when a ToolExecutor is built (see
ExecutorConfig.from_settings); changing the environment afterwards does not
affect a running executor.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the LLM_TOOLPIPE_ prefix for environment variables.
    Example: LLM_TOOLPIPE_TOOL_TIMEOUT_MS=5000
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="llm-toolpipe",
        description="Name of the service for logging and identification",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level emitted by the structured logger",
    )

    # =========================================================================
    # Tool Executor Configuration
    # =========================================================================
    tool_timeout_ms: int = Field(
        default=30_000,
        ge=1,
        le=3_600_000,
        description="Per-call wall-clock budget in milliseconds",
    )
    tool_max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Attempts beyond the first for a single tool call",
    )
    tool_parallel_execution: bool = Field(
        default=True,
        description="Run a batch of tool calls concurrently instead of in order",
    )
    tool_retry_backoff_ms: int = Field(
        default=0,
        ge=0,
        le=60_000,
        description="Delay between retry attempts in milliseconds (0 = immediate)",
    )

    # =========================================================================
    # Conversation Loop Configuration
    # =========================================================================
    max_tool_iterations: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum provider round-trips spent on tool calls per turn",
    )
    default_provider: Literal["openai", "anthropic", "google", "grok"] = Field(
        default="openai",
        description="Provider whose tool conventions are validated by default",
    )
    tool_definitions_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file with tool definitions to preload",
    )

    model_config = {
        "env_prefix": "LLM_TOOLPIPE_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {sorted(VALID_LOG_LEVELS)}")
        return level


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
