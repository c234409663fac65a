"""JsonRpcDispatcher: routes JSON-RPC envelopes to the server's operations."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from wmcp.protocols.errors import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
    ToolCallError,
)
from wmcp.protocols.models import JsonRpcRequest, JsonRpcResponse, ToolCallParams, is_valid_id
from wmcp.runtime.invoker import Invoker, Success
from wmcp.runtime.validator import SchemaValidator
from wmcp.utils.telemetry import ATTR_RPC_BATCH_SIZE, ATTR_RPC_METHOD, get_tracer, set_rpc_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from wmcp.registry.registry import ToolRegistry

    Handler = Callable[[dict[str, Any]], Awaitable[Any]]

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]

Message = dict[str, Any]
Reply = Message | list[Message] | None


class JsonRpcDispatcher:
    """Stateless router from JSON-RPC requests to tool operations.

    Transports hand raw bodies (or already-decoded messages) to the
    dispatcher and write back whatever it returns; ``None`` means there is
    nothing to send (notifications only).  Every failure is mapped to a
    JSON-RPC error object, so the dispatcher never raises to its caller.

    Usage::

        dispatcher = JsonRpcDispatcher(registry, invoker=Invoker(10.0))

        reply = await dispatcher.handle_payload(b'{"jsonrpc": "2.0", ...}')
        reply = await dispatcher.dispatch([{...}, {...}])   # batch
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        validator: SchemaValidator | None = None,
        invoker: Invoker | None = None,
        server_name: str = "weaviate-mcp-server",
        server_version: str | None = None,
    ) -> None:
        self._registry = registry
        self._validator = validator or SchemaValidator()
        self._invoker = invoker or Invoker()
        self._server_name = server_name
        if server_version is None:
            from wmcp import __version__

            server_version = __version__
        self._server_version = server_version
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "notifications/initialized": self._ack,
            "notifications/cancelled": self._ack,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @staticmethod
    def parse(body: bytes | str) -> Any:
        """Decode a request body; raise :class:`ParseError` on malformed JSON.

        ``NaN`` and ``Infinity`` are not JSON and are rejected like any other
        malformed input.
        """
        try:
            return json.loads(body, parse_constant=_reject_constant)
        except (ValueError, UnicodeDecodeError) as exc:
            raise ParseError() from exc

    async def handle_payload(self, body: bytes | str) -> Reply:
        """Parse *body* and dispatch it."""
        try:
            message = self.parse(body)
        except ParseError as exc:
            return JsonRpcResponse.failure(None, exc).to_wire()
        return await self.dispatch(message)

    async def dispatch(self, message: Any) -> Reply:
        """Dispatch a decoded single request or batch."""
        if isinstance(message, list):
            return await self._dispatch_batch(message)
        return await self.dispatch_one(message)

    async def _dispatch_batch(self, batch: list[Any]) -> Reply:
        if not batch:
            return JsonRpcResponse.failure(None, InvalidRequestError("empty batch")).to_wire()
        with _tracer.start_as_current_span("wmcp.rpc.batch") as span:
            span.set_attribute(ATTR_RPC_BATCH_SIZE, len(batch))
            replies = await asyncio.gather(*(self.dispatch_one(item) for item in batch))
        responses = [reply for reply in replies if reply is not None]
        return responses or None

    async def dispatch_one(self, message: Any) -> Message | None:
        """Dispatch one envelope and return its response, or ``None`` for notifications."""
        if not isinstance(message, dict):
            return JsonRpcResponse.failure(None, InvalidRequestError("expected an object")).to_wire()

        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            raw_id = message.get("id")
            echo_id = raw_id if is_valid_id(raw_id) else None
            return JsonRpcResponse.failure(echo_id, InvalidRequestError(_describe(exc))).to_wire()

        with _tracer.start_as_current_span("wmcp.rpc.request") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            set_rpc_id(span, request.id)
            try:
                result = await self._route(request)
            except ProtocolError as exc:
                response = JsonRpcResponse.failure(request.id, exc)
            except Exception:
                logger.exception("Unhandled error while dispatching %s", request.method)
                response = JsonRpcResponse.failure(request.id, InternalError())
            else:
                response = JsonRpcResponse.success(request.id, result)

        if request.is_notification:
            if response.error is not None:
                logger.debug("Dropping error for notification %s: %s", request.method, response.error.message)
            return None
        return response.to_wire()

    async def _route(self, request: JsonRpcRequest) -> Any:
        handler = self._handlers.get(request.method)
        if handler is None:
            raise MethodNotFoundError(request.method)
        if isinstance(request.params, list):
            msg = "positional params are not supported"
            raise InvalidParamsError(msg)
        return await handler(request.params or {})

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        client = params.get("clientInfo") or {}
        logger.info("Client %s initialized with protocol %s", client.get("name", "unknown"), version)
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self._server_name, "version": self._server_version},
        }

    async def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _ack(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [descriptor.to_listing().to_wire() for descriptor in self._registry.list()]}

    async def _tools_call(self, params: dict[str, Any]) -> Any:
        if params.get("arguments") is None:
            params = {**params, "arguments": {}}
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as exc:
            raise InvalidParamsError(_describe(exc)) from exc

        descriptor = self._registry.lookup(call.name)
        self._validator.validate(descriptor.parameter_schema, call.arguments)

        outcome = await self._invoker.invoke(descriptor, call.arguments)
        if isinstance(outcome, Success):
            return outcome.value
        raise ToolCallError(outcome.kind, outcome.message, data=outcome.detail)


def _reject_constant(token: str) -> Any:
    msg = f"{token} is not valid JSON"
    raise ValueError(msg)


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "message"
    return f"{location}: {first['msg']}"
