"""
Tool Executor

This module executes model-issued tool calls against the implementations
bound by the host application, under a timeout, retry and concurrency
policy, and normalizes every outcome into a ToolCallResult.

Pattern: Command Executor (tool calls executed as commands)
Pattern: Async-first with sync handler support
Pattern: Fail-fast validation with graceful error wrapping

Per-call lifecycle:
    Pending -> Running -> Succeeded
                       -> Failed(execution_timeout)
                       -> Failed(execution_error)
    Pending -> Failed(tool_not_found | invalid_arguments)

Retries re-enter Running internally (timeouts and implementation errors
only; a ToolPipeException that is not retryable stops at once) and are not
visible to callers. One result is emitted per request.

Timeouts race the implementation against asyncio.wait_for. Async
implementations are cancelled when they lose; sync implementations run in
the loop's default thread pool and may finish in the background, with their
value discarded.
"""

import asyncio
import copy
import inspect
import json
import threading
from collections.abc import Awaitable, Mapping, Sequence
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel

from llm_toolpipe.core.exceptions import (
    ErrorCode,
    InvalidToolArgumentsError,
    ToolNotFoundError,
    ToolPipeException,
    ToolTimeoutError,
)
from llm_toolpipe.models.domain import (
    ExecutorConfig,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
)
from llm_toolpipe.observability.logging import ToolLogger, get_logger
from llm_toolpipe.observability.metrics import (
    SUCCESS_OUTCOME,
    UNKNOWN_TOOL_LABEL,
    Stopwatch,
    record_tool_call,
    record_tool_retry,
    track_in_progress,
)
from llm_toolpipe.tools.registry import ToolRegistry

# An implementation takes the parsed argument object and returns a value,
# or an awaitable resolving to one.
ToolImplementation = Callable[[dict[str, Any]], Union[Any, Awaitable[Any]]]

_JSON_TYPES: dict[str, Union[type, tuple[type, ...]]] = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "array": list,
    "object": dict,
}


class ToolExecutor:
    """
    Executor for running tool calls against bound implementations.

    The executor owns the implementation map (copied at construction) and
    reads tool schemas from the injected registry to validate arguments.

    Attributes:
        registry: Registry used for schema lookup and get_all_tools().
        config: Immutable execution policy.

    Example:
        >>> executor = ToolExecutor(
        ...     registry,
        ...     {"echo": lambda args: args["text"]},
        ...     logger,
        ...     ExecutorConfig(tool_timeout_ms=5000),
        ... )
        >>> await executor.execute_tool_call(
        ...     ToolCallRequest(call_id="c1", name="echo", arguments_json='{"text": "hi"}')
        ... )
        ToolCallResult(call_id='c1', success=True, output='hi', error=None)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        implementations: Optional[Mapping[str, ToolImplementation]] = None,
        logger: Optional[ToolLogger] = None,
        config: Optional[ExecutorConfig] = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            registry: Registry holding tool definitions.
            implementations: Name to callable bindings supplied by the host.
            logger: Logger for execution events (default: structlog logger).
            config: Execution policy (default: ExecutorConfig()).
        """
        self.registry = registry
        self._implementations: dict[str, ToolImplementation] = dict(
            implementations or {}
        )
        self._logger = logger or get_logger(__name__)
        self._config = config or ExecutorConfig()
        self._lock = threading.Lock()
        self._logger.debug(
            f"ToolExecutor initialized with config: {self._config.model_dump_json()}"
        )

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    # =========================================================================
    # Implementation Bindings
    # =========================================================================

    def register_tool_implementation(
        self, name: str, implementation: ToolImplementation
    ) -> bool:
        """
        Bind an implementation to a tool name.

        Existing bindings are never overwritten. The map is replaced rather
        than mutated, so calls already in flight keep the snapshot they
        started with.

        Args:
            name: Tool name.
            implementation: Callable receiving the parsed argument dict.

        Returns:
            True if bound, False if the name already has an implementation.

        Raises:
            TypeError: If implementation is not callable.
        """
        if not callable(implementation):
            raise TypeError(f"Implementation for '{name}' must be callable")

        with self._lock:
            if name in self._implementations:
                self._logger.warning(f"Tool implementation with name '{name}' already exists")
                return False
            self._implementations = {**self._implementations, name: implementation}

        self._logger.debug(f"Registered tool implementation: {name}")
        return True

    def get_tool_implementations(self) -> dict[str, ToolImplementation]:
        """Snapshot of the name to implementation mapping."""
        return dict(self._implementations)

    def has_tool_implementation(self, name: str) -> bool:
        return name in self._implementations

    def get_all_tools(self) -> list[ToolDefinition]:
        """All definitions declared in the registry."""
        return self.registry.get_all_tools()

    # =========================================================================
    # Single Call Execution
    # =========================================================================

    async def execute_tool_call(self, request: ToolCallRequest) -> ToolCallResult:
        """
        Execute one tool call and report the outcome.

        Never raises for per-call failures: every failure is returned as a
        ToolCallResult with success=False.

        Args:
            request: The model-issued call.

        Returns:
            ToolCallResult echoing request.call_id.
        """
        name, call_id = request.name, request.call_id
        self._logger.debug(f"Executing tool call: {name} (ID: {call_id})")

        implementation = self._implementations.get(name)
        if implementation is None:
            self._logger.error(f"Tool not found: {name}")
            record_tool_call(UNKNOWN_TOOL_LABEL, ErrorCode.TOOL_NOT_FOUND.value, 0.0)
            return ToolCallResult.failed(
                call_id, ErrorCode.TOOL_NOT_FOUND, f"Tool not found: {name}"
            )

        stopwatch = Stopwatch()
        try:
            arguments = self._parse_arguments(name, request.arguments_json)
            self._validate_arguments(name, arguments)
        except InvalidToolArgumentsError as e:
            self._logger.error(
                f"Invalid arguments for tool call {name} (ID: {call_id}): {e.message}"
            )
            record_tool_call(name, ErrorCode.INVALID_ARGUMENTS.value, stopwatch.elapsed)
            return ToolCallResult.failed(call_id, ErrorCode.INVALID_ARGUMENTS, e.message)

        try:
            with track_in_progress():
                output = await self._execute_with_retries(name, implementation, arguments)
            content = serialize_output(output)
        except ToolTimeoutError as e:
            self._logger.error(f"Tool call {name} (ID: {call_id}) timed out: {e.message}")
            record_tool_call(name, ErrorCode.EXECUTION_TIMEOUT.value, stopwatch.elapsed)
            return ToolCallResult.failed(call_id, ErrorCode.EXECUTION_TIMEOUT, e.message)
        except ToolPipeException as e:
            # Implementations may raise pipeline errors to choose the reported code
            self._logger.error(f"Error executing tool call {name} (ID: {call_id}): {e.message}")
            record_tool_call(name, e.error_code.value, stopwatch.elapsed)
            return ToolCallResult.failed(call_id, e.error_code, e.message)
        except Exception as e:
            message = str(e) or type(e).__name__
            self._logger.error(f"Error executing tool call {name} (ID: {call_id}): {message}")
            record_tool_call(name, ErrorCode.EXECUTION_ERROR.value, stopwatch.elapsed)
            return ToolCallResult.failed(call_id, ErrorCode.EXECUTION_ERROR, message)

        self._logger.debug(f"Tool call {name} (ID: {call_id}) executed successfully")
        record_tool_call(name, SUCCESS_OUTCOME, stopwatch.elapsed)
        return ToolCallResult.ok(call_id, content)

    # =========================================================================
    # Batch Execution
    # =========================================================================

    async def execute_tool_calls(
        self, requests: Sequence[ToolCallRequest]
    ) -> list[ToolCallResult]:
        """
        Execute a batch of tool calls.

        Results come back in input order, one per request, whatever the
        completion order. No call's failure aborts or short-circuits the
        others.

        Args:
            requests: Calls emitted by one model turn.

        Returns:
            List of ToolCallResults aligned with requests.
        """
        if not requests:
            return []

        if self._config.parallel_execution:
            self._logger.debug(f"Executing {len(requests)} tool calls in parallel")
            results = await asyncio.gather(
                *(self.execute_tool_call(request) for request in requests)
            )
            return list(results)

        self._logger.debug(f"Executing {len(requests)} tool calls sequentially")
        sequential: list[ToolCallResult] = []
        for request in requests:
            sequential.append(await self.execute_tool_call(request))
        return sequential

    # =========================================================================
    # Direct Execution
    # =========================================================================

    async def execute_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """
        Execute a tool directly by name, without the result envelope.

        Intended for internal callers that trust name and arguments. Runs a
        single attempt under the timeout budget.

        Args:
            name: Tool name.
            arguments: Argument object passed to the implementation.

        Returns:
            The implementation's raw return value.

        Raises:
            ToolNotFoundError: If no implementation is bound to name.
            ToolTimeoutError: If the call exceeds the timeout budget.
            Exception: Whatever the implementation raised.
        """
        self._logger.debug(f"Executing tool: {name}")

        implementation = self._implementations.get(name)
        if implementation is None:
            self._logger.error(f"Tool not found: {name}")
            raise ToolNotFoundError(name)

        try:
            output = await self._execute_with_timeout(name, implementation, arguments)
        except Exception as e:
            self._logger.error(f"Error executing tool {name}: {e}")
            raise

        self._logger.debug(f"Tool {name} executed successfully")
        return output

    # =========================================================================
    # Argument Handling
    # =========================================================================

    def _parse_arguments(self, tool_name: str, arguments_json: str) -> dict[str, Any]:
        """
        Parse the serialized arguments into an object.

        An empty payload means no arguments.

        Raises:
            InvalidToolArgumentsError: On malformed JSON or a non-object value.
        """
        if not arguments_json.strip():
            return {}

        try:
            arguments = json.loads(arguments_json)
        except json.JSONDecodeError as e:
            raise InvalidToolArgumentsError(
                f"Invalid JSON arguments for tool '{tool_name}': {e.msg} "
                f"(line {e.lineno}, column {e.colno})",
                tool_name=tool_name,
            ) from e
        except (RecursionError, ValueError) as e:
            # Nesting too deep for the decoder, or a number it cannot convert
            raise InvalidToolArgumentsError(
                f"Invalid JSON arguments for tool '{tool_name}': "
                f"{type(e).__name__}",
                tool_name=tool_name,
            ) from e

        if not isinstance(arguments, dict):
            raise InvalidToolArgumentsError(
                f"Arguments for tool '{tool_name}' must be a JSON object, "
                f"got {type(arguments).__name__}",
                tool_name=tool_name,
            )
        return arguments

    def _validate_arguments(self, tool_name: str, arguments: dict[str, Any]) -> None:
        """
        Validate arguments against the tool's declared JSON Schema.

        Tools bound without a registry definition are not checked. Performs
        basic validation:
        - Required properties are present
        - Declared primitive types match

        Raises:
            InvalidToolArgumentsError: If validation fails.
        """
        definition = self.registry.get_tool(tool_name)
        if definition is None:
            return

        for prop in definition.required_arguments:
            if prop not in arguments:
                raise InvalidToolArgumentsError(
                    f"Missing required argument: {prop}",
                    tool_name=tool_name,
                    field=prop,
                )

        properties = definition.parameters.get("properties", {})
        if not isinstance(properties, dict):
            return

        for prop_name, value in arguments.items():
            prop_schema = properties.get(prop_name)
            if not isinstance(prop_schema, dict):
                continue  # Allow extra properties

            expected_type = prop_schema.get("type")
            if expected_type and not _matches_type(value, expected_type):
                raise InvalidToolArgumentsError(
                    f"Invalid type for '{prop_name}': expected {expected_type}, "
                    f"got {type(value).__name__}",
                    tool_name=tool_name,
                    field=prop_name,
                )

    # =========================================================================
    # Timeout and Retry Handling
    # =========================================================================

    async def _execute_with_retries(
        self,
        name: str,
        implementation: ToolImplementation,
        arguments: dict[str, Any],
    ) -> Any:
        """
        Run the implementation, retrying timeouts and raised errors.

        Each attempt gets a fresh timeout window and its own copy of the
        arguments. A non-retryable ToolPipeException propagates at once; the
        final attempt runs outside the retry loop so its exception propagates.
        """
        max_attempts = self._config.max_attempts
        backoff = self._config.retry_backoff_ms / 1000

        for attempt in range(1, max_attempts):
            try:
                return await self._execute_with_timeout(
                    name, implementation, copy.deepcopy(arguments)
                )
            except Exception as e:
                if not _is_retryable(e):
                    raise
                self._logger.warning(
                    f"Tool {name} attempt {attempt}/{max_attempts} failed: {e}; retrying"
                )
                record_tool_retry(name)
                if backoff:
                    await asyncio.sleep(backoff)

        return await self._execute_with_timeout(
            name, implementation, copy.deepcopy(arguments)
        )

    async def _execute_with_timeout(
        self,
        name: str,
        implementation: ToolImplementation,
        arguments: dict[str, Any],
    ) -> Any:
        """
        Execute an implementation with timeout protection.

        Raises:
            ToolTimeoutError: If execution exceeds the budget.
        """
        try:
            return await asyncio.wait_for(
                _invoke(implementation, arguments),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            self._logger.warning(
                f"Tool {name} timed out after {self._config.tool_timeout_ms}ms"
            )
            raise ToolTimeoutError(name, self._config.tool_timeout_ms) from e


# =============================================================================
# Helpers
# =============================================================================


async def _invoke(implementation: ToolImplementation, arguments: dict[str, Any]) -> Any:
    """
    Call an implementation, sync or async.

    Sync handlers are run in the default executor to avoid blocking the loop;
    an awaitable they return is awaited.
    """
    if inspect.iscoroutinefunction(implementation):
        return await implementation(arguments)

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, implementation, arguments)
    if inspect.isawaitable(result):
        result = await result
    return result


def _is_retryable(error: Exception) -> bool:
    """Plain exceptions are retried; pipeline errors decide by error code."""
    if isinstance(error, ToolPipeException):
        return error.retryable
    return True


def _matches_type(value: Any, expected_type: Union[str, list[str]]) -> bool:
    """Check a value against a JSON Schema type (or list of types)."""
    if isinstance(expected_type, list):
        return any(_matches_type(value, t) for t in expected_type)

    if expected_type == "null":
        return value is None

    python_type = _JSON_TYPES.get(expected_type)
    if python_type is None:
        return True  # Unknown type, allow

    # bool is a subclass of int but not a JSON number
    if expected_type in ("integer", "number") and isinstance(value, bool):
        return False

    return isinstance(value, python_type)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def serialize_output(value: Any) -> str:
    """
    Canonicalize an implementation's return value to a string.

    Strings pass through unchanged; Pydantic models use their JSON dump;
    anything else is JSON-serialized.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, default=_json_default)
