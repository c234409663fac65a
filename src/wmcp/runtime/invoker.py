"""Invoker: runs a tool capability under a deadline and classifies the outcome.

The invoker is the only place that catches capability exceptions.  Whatever
happens inside the adapter, the caller gets back a :data:`ToolCallOutcome`;
only cancellation of the invoking task itself propagates.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wmcp.protocols.errors import ErrorKind
from wmcp.runtime.errors import AdapterCallError
from wmcp.utils.telemetry import ATTR_TOOL_NAME, ATTR_TOOL_OUTCOME, ATTR_TOOL_TIMEOUT, get_tracer

if TYPE_CHECKING:
    from wmcp.registry.models import ToolDescriptor

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_CALL_TIMEOUT = 30.0


@dataclass(frozen=True)
class Success:
    """The capability resolved with a JSON value."""

    value: Any

    ok = True


@dataclass(frozen=True)
class Failure:
    """The capability raised, timed out, or returned something unusable."""

    kind: ErrorKind
    message: str
    detail: dict[str, Any] = field(default_factory=dict)

    ok = False


ToolCallOutcome = Success | Failure


class Invoker:
    """Executes capabilities with validated arguments.

    Coroutine capabilities run as tasks and are cancelled on timeout.
    Synchronous capabilities run in a worker thread; a thread cannot be
    cancelled, so on timeout it is left to finish and its result discarded.
    Calls are never retried.
    """

    def __init__(self, default_timeout: float = DEFAULT_CALL_TIMEOUT) -> None:
        if default_timeout <= 0:
            msg = f"default_timeout must be positive, got {default_timeout}"
            raise ValueError(msg)
        self._default_timeout = default_timeout

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    async def invoke(
        self,
        descriptor: ToolDescriptor,
        arguments: dict[str, Any],
        deadline: float | None = None,
    ) -> ToolCallOutcome:
        timeout = deadline if deadline is not None else self._default_timeout
        with _tracer.start_as_current_span("wmcp.tool.invoke") as span:
            span.set_attribute(ATTR_TOOL_NAME, descriptor.name)
            span.set_attribute(ATTR_TOOL_TIMEOUT, timeout)
            outcome = await self._run(descriptor, arguments, timeout)
            span.set_attribute(ATTR_TOOL_OUTCOME, "success" if outcome.ok else outcome.kind.name.lower())
            return outcome

    async def _run(
        self,
        descriptor: ToolDescriptor,
        arguments: dict[str, Any],
        timeout: float,
    ) -> ToolCallOutcome:
        task = asyncio.ensure_future(_call(descriptor, arguments))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            task.cancel()
            task.add_done_callback(_consume)
            logger.warning("Tool %s timed out after %ss", descriptor.name, timeout)
            return Failure(
                ErrorKind.TIMEOUT,
                f"Tool '{descriptor.name}' timed out after {timeout}s",
                {"tool": descriptor.name, "timeout": timeout},
            )

        try:
            value = task.result()
        except asyncio.CancelledError:
            # The capability cancelled itself; the invoking task is still live.
            return _adapter_failure(descriptor.name, "Tool call was cancelled", {"type": "CancelledError"})
        except Exception as exc:
            logger.warning("Tool %s failed: %s", descriptor.name, exc)
            return _adapter_failure(descriptor.name, str(exc) or type(exc).__name__, _describe(exc))

        try:
            json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Tool %s returned a non-JSON result: %s", descriptor.name, exc)
            return _adapter_failure(
                descriptor.name,
                "Tool returned a result that is not JSON-serializable",
                {"type": type(value).__name__},
            )
        return Success(value)


async def _call(descriptor: ToolDescriptor, arguments: dict[str, Any]) -> Any:
    capability = descriptor.capability
    if inspect.iscoroutinefunction(capability):
        return await capability(arguments)
    result = await asyncio.to_thread(capability, arguments)
    if inspect.isawaitable(result):
        return await result
    return result


def _consume(task: asyncio.Future[Any]) -> None:
    if not task.cancelled():
        task.exception()


def _describe(exc: BaseException) -> dict[str, Any]:
    detail: dict[str, Any] = {"type": type(exc).__name__}
    if isinstance(exc, AdapterCallError):
        detail["status"] = exc.status
        detail["body"] = exc.body
    return detail


def _adapter_failure(tool: str, message: str, detail: dict[str, Any]) -> Failure:
    return Failure(ErrorKind.ADAPTER_ERROR, message, {"tool": tool, "detail": detail})
