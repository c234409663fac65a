"""JSON-RPC 2.0 messages and tool listings.

Implements the message format used for tool discovery (``tools/list``) and
execution (``tools/call``).  Requests are validated with pydantic; responses
are built through :class:`JsonRpcResponse` so that exactly one of ``result``
or ``error`` ever reaches the wire.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

if TYPE_CHECKING:
    from wmcp.protocols.errors import ProtocolError

JSONRPC_VERSION = "2.0"

RequestId = str | int | float | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


def is_valid_id(value: Any) -> bool:
    """Return whether *value* may be used as a request ``id``."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return value is None or isinstance(value, (str, int))


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification.

    ``id`` absent or ``null`` marks a notification.
    """

    model_config = ConfigDict(extra="ignore")

    jsonrpc: Literal["2.0"]
    method: StrictStr
    id: Any = None
    params: dict[str, Any] | list[Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _check_id(cls, value: Any) -> Any:
        if not is_valid_id(value):
            msg = "id must be a string, a number or null"
            raise ValueError(msg)
        return value

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    @classmethod
    def from_exception(cls, exc: ProtocolError) -> JsonRpcError:
        return cls(code=exc.kind.code, message=exc.message, data=exc.data)


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, request_id: RequestId, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: RequestId, exc: ProtocolError) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError.from_exception(exc))

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the wire shape: ``result`` or ``error``, never both."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


# ---------------------------------------------------------------------------
# Tool payloads
# ---------------------------------------------------------------------------


class ToolListing(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolCallParams(BaseModel):
    """``params`` of a ``tools/call`` request."""

    name: StrictStr
    arguments: dict[str, Any] = Field(default_factory=dict)
