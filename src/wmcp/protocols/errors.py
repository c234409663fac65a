"""Shared error types for the protocol layer.

Every error a client can observe maps to one :class:`ErrorKind`, whose value
is the JSON-RPC error code written on the wire.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorKind(IntEnum):
    """JSON-RPC error taxonomy surfaced to clients."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    ADAPTER_ERROR = -32000
    TIMEOUT = -32001

    @property
    def code(self) -> int:
        return int(self.value)


class ProtocolError(Exception):
    """Base error for all protocol-layer failures.

    Carries everything needed to build a JSON-RPC error object: the
    :class:`ErrorKind` (code), a client-safe message and optional ``data``.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, *, data: Any = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)


class ParseError(ProtocolError):
    """The request body is not valid JSON."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(self) -> None:
        super().__init__("Parse error")


class InvalidRequestError(ProtocolError):
    """The envelope is not a valid JSON-RPC 2.0 request."""

    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, detail: str = "") -> None:
        super().__init__("Invalid Request" + (f": {detail}" if detail else ""))


class MethodNotFoundError(ProtocolError):
    """The requested method is not one of the dispatcher's operations."""

    kind = ErrorKind.METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}", data={"method": method})


class InvalidParamsError(ProtocolError):
    """The method's params are unusable."""

    kind = ErrorKind.INVALID_PARAMS


class ToolNotFoundError(InvalidParamsError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}", data={"tool": name})


class SchemaValidationError(InvalidParamsError):
    """Tool arguments do not satisfy the tool's parameter schema."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            f"Invalid arguments at {path}: {reason}",
            data={"path": path, "reason": reason},
        )


class ToolCallError(ProtocolError):
    """A tool ran and failed; ``kind`` is chosen by the invoker."""

    def __init__(self, kind: ErrorKind, message: str, *, data: Any = None) -> None:
        self.kind = kind
        super().__init__(message, data=data)


class InternalError(ProtocolError):
    """Uncategorized failure inside the dispatcher itself."""

    kind = ErrorKind.INTERNAL_ERROR

    def __init__(self) -> None:
        super().__init__("Internal error")


class ProbeError(Exception):
    """A remote server could not be reached or answered unexpectedly."""


class RemoteToolError(Exception):
    """A remote server answered a request with a JSON-RPC error."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"Remote error {code}: {message}")
