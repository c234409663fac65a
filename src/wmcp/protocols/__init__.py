"""Protocol layer: JSON-RPC 2.0 envelopes, error taxonomy and dispatch.

The dispatcher and the probe client live in :mod:`wmcp.protocols.dispatcher`
and :mod:`wmcp.protocols.client`; they are not re-exported here because the
runtime layer imports this package's error types.
"""

from wmcp.protocols.errors import (
    ErrorKind,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProbeError,
    ProtocolError,
    RemoteToolError,
    SchemaValidationError,
    ToolCallError,
    ToolNotFoundError,
)
from wmcp.protocols.models import (
    JSONRPC_VERSION,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolCallParams,
    ToolListing,
)

__all__ = [
    "JSONRPC_VERSION",
    "ErrorKind",
    "InternalError",
    "InvalidParamsError",
    "InvalidRequestError",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MethodNotFoundError",
    "ParseError",
    "ProbeError",
    "ProtocolError",
    "RemoteToolError",
    "SchemaValidationError",
    "ToolCallError",
    "ToolListing",
    "ToolNotFoundError",
    "ToolCallParams",
]
