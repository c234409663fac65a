"""Shared error types for the tool execution layer."""

from __future__ import annotations

from typing import Any


class ToolExecutionError(Exception):
    """Base error for failures raised by tool capabilities."""


class AdapterCallError(ToolExecutionError):
    """A downstream call made by an adapter failed.

    ``status`` is the HTTP status of the downstream response, or ``None`` for
    transport failures (connection refused, DNS, read timeout).  ``body`` is
    the decoded response body when one was received.
    """

    def __init__(self, detail: str, *, status: int | None = None, body: Any = None) -> None:
        self.detail = detail
        self.status = status
        self.body = body
        msg = "Adapter call failed"
        if status is not None:
            msg += f" with HTTP {status}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
