"""WeaviateToolset: turns endpoint declarations into tool capabilities."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from wmcp.protocols.errors import ToolNotFoundError
from wmcp.registry.models import ToolDescriptor
from wmcp.runtime.errors import AdapterCallError
from wmcp.tools.catalog import CATALOG
from wmcp.utils.telemetry import ATTR_HTTP_STATUS, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from wmcp.config import WeaviateSettings
    from wmcp.registry.models import Capability
    from wmcp.tools.models import WeaviateEndpoint

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_DELETED_MESSAGE = "Successfully deleted."


class WeaviateToolset:
    """Executes Weaviate REST tools over one shared HTTP client.

    Usage::

        async with WeaviateToolset(settings) as toolset:
            registry = ToolRegistry.from_descriptors(toolset.descriptors())
            meta = await toolset.execute("get_instance_metadata", {})

    A client passed in by the caller is used as-is and left open by
    :meth:`aclose`; otherwise the toolset owns its client.
    """

    def __init__(
        self,
        settings: WeaviateSettings,
        endpoints: Sequence[WeaviateEndpoint] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._endpoints: dict[str, WeaviateEndpoint] = {
            e.name: e for e in (CATALOG if endpoints is None else endpoints)
        }
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def __aenter__(self) -> WeaviateToolset:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def endpoints(self) -> list[WeaviateEndpoint]:
        return list(self._endpoints.values())

    def descriptors(self) -> list[ToolDescriptor]:
        """One registry descriptor per endpoint, in declaration order."""
        return [
            ToolDescriptor.from_definition(endpoint.to_definition(), self.capability(endpoint))
            for endpoint in self._endpoints.values()
        ]

    def capability(self, endpoint: WeaviateEndpoint) -> Capability:
        async def call(arguments: dict[str, Any]) -> Any:
            return await self.execute(endpoint.name, arguments)

        call.__name__ = endpoint.name
        call.__qualname__ = f"WeaviateToolset.{endpoint.name}"
        return call

    async def execute(self, name: str, arguments: dict[str, Any]) -> Any:
        """Execute the tool called *name* directly, bypassing the registry."""
        endpoint = self._endpoints.get(name)
        if endpoint is None:
            raise ToolNotFoundError(name)
        return await self._request(endpoint, arguments)

    async def _request(self, endpoint: WeaviateEndpoint, arguments: dict[str, Any]) -> Any:
        merged = {**endpoint.defaults, **{k: v for k, v in arguments.items() if v is not None}}
        url = self._settings.base_url + endpoint.render_path(merged)
        body = endpoint.render_body(merged)

        headers = {**self._settings.headers(), "Accept": "application/json", **endpoint.headers}
        if body is None:
            headers.pop("Content-Type", None)

        logger.debug("%s %s", endpoint.method, url)
        with _tracer.start_as_current_span("wmcp.weaviate.request") as span:
            span.set_attribute(ATTR_TOOL_NAME, endpoint.name)
            try:
                response = await self._client.request(
                    endpoint.method,
                    url,
                    params=endpoint.render_query(merged),
                    headers=headers,
                    json=body,
                )
            except httpx.HTTPError as exc:
                raise AdapterCallError(str(exc) or type(exc).__name__) from exc
            span.set_attribute(ATTR_HTTP_STATUS, response.status_code)

        return _interpret(endpoint, response)


def _interpret(endpoint: WeaviateEndpoint, response: httpx.Response) -> Any:
    status = response.status_code
    if endpoint.response == "exists":
        if response.is_success:
            return {"exists": True}
        if status == 404:
            return {"exists": False}

    if not response.is_success:
        raise AdapterCallError(
            f"{endpoint.method} {endpoint.path} returned {status}",
            status=status,
            body=_decode(response),
        )

    if endpoint.response == "deleted":
        return {"status": status, "message": _DELETED_MESSAGE}
    if endpoint.response == "text":
        return {"status": status, "message": response.text}
    if not response.content:
        return {"status": status}
    try:
        return response.json()
    except ValueError:
        return {"status": status, "message": response.text}


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
