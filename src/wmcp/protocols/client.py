"""MessagesClient: talks to a running server over its HTTP transports.

Implements tool discovery (``tools/list``) and execution (``tools/call``)
against ``POST /messages``, and opens ``GET /sse`` sessions for probing.
"""

from __future__ import annotations

import itertools
from typing import Any, cast

import httpx

from wmcp.protocols.errors import ProbeError, RemoteToolError
from wmcp.transport.sse import ENDPOINT_EVENT, parse_events


class MessagesClient:
    """Async context manager over an :class:`httpx.AsyncClient`.

    Usage::

        async with MessagesClient("http://localhost:4001") as client:
            tools = await client.list_tools()
            result = await client.call_tool("check_liveness", {})
            endpoint = await client.open_session()
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> MessagesClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one JSON-RPC request and return the raw response envelope."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or {}}
        try:
            response = await self._client.post(f"{self._base_url}/messages", json=payload)
        except httpx.HTTPError as exc:
            raise ProbeError(f"POST /messages failed: {exc}") from exc
        if response.status_code != 200:
            raise ProbeError(f"POST /messages returned HTTP {response.status_code}")
        try:
            envelope = response.json()
        except ValueError as exc:
            raise ProbeError("POST /messages returned a non-JSON body") from exc
        if not isinstance(envelope, dict) or envelope.get("id") != payload["id"]:
            raise ProbeError("POST /messages returned an unexpected envelope")
        return cast("dict[str, Any]", envelope)

    async def list_tools(self) -> list[dict[str, Any]]:
        """Send ``tools/list`` and return the tool entries."""
        result = _unwrap(await self.request("tools/list"))
        return cast("list[dict[str, Any]]", result.get("tools", []))

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        """Send ``tools/call``; raise :class:`RemoteToolError` on an error envelope."""
        return _unwrap(await self.request("tools/call", {"name": name, "arguments": arguments or {}}))

    async def open_session(self) -> str:
        """Open ``GET /sse`` and return the sideband endpoint it announces.

        The stream is closed as soon as the endpoint event has been read.
        """
        try:
            async with self._client.stream(
                "GET", f"{self._base_url}/sse", headers={"Accept": "text/event-stream"}
            ) as response:
                if response.status_code != 200:
                    raise ProbeError(f"GET /sse returned HTTP {response.status_code}")
                async for event in parse_events(response.aiter_lines()):
                    if event.event != ENDPOINT_EVENT:
                        raise ProbeError(f"GET /sse started with a '{event.event}' event")
                    return event.data
        except httpx.HTTPError as exc:
            raise ProbeError(f"GET /sse failed: {exc}") from exc
        raise ProbeError("GET /sse closed before sending an endpoint event")


def _unwrap(envelope: dict[str, Any]) -> Any:
    error = envelope.get("error")
    if error is not None:
        raise RemoteToolError(error.get("code", 0), error.get("message", ""), error.get("data"))
    return envelope.get("result")
