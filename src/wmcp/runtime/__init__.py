"""Tool execution layer: argument validation and deadline-bound invocation."""

from wmcp.runtime.errors import AdapterCallError, ToolExecutionError
from wmcp.runtime.invoker import DEFAULT_CALL_TIMEOUT, Failure, Invoker, Success, ToolCallOutcome
from wmcp.runtime.validator import SchemaValidator, format_path

__all__ = [
    "DEFAULT_CALL_TIMEOUT",
    "AdapterCallError",
    "Failure",
    "Invoker",
    "SchemaValidator",
    "Success",
    "ToolCallOutcome",
    "ToolExecutionError",
    "format_path",
]
