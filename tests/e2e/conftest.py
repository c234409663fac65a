"""Shared helpers for E2E integration tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
from fastapi import FastAPI

from wmcp.config import WeaviateSettings
from wmcp.protocols.dispatcher import JsonRpcDispatcher
from wmcp.runtime import Invoker
from wmcp.tools import build_registry
from wmcp.transport import SessionManager, create_app

WeaviateRoute = Callable[[httpx.Request], httpx.Response]


def make_weaviate_stub(routes: dict[tuple[str, str], WeaviateRoute | httpx.Response]) -> Callable[[httpx.Request], httpx.Response]:
    """Build a handler for ``httpx.MockTransport`` that fakes Weaviate.

    *routes* maps ``(method, path)`` (path including ``/v1``) to a response
    or a callable producing one; anything else answers 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": [{"message": f"no route {request.url.path}"}]})
        if isinstance(route, httpx.Response):
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        return route(request)

    return handler


def make_server_app(
    weaviate: Callable[[httpx.Request], httpx.Response],
    *,
    call_timeout: float = 5.0,
    **session_kwargs: Any,
) -> FastAPI:
    """Compose the full server over a fake Weaviate, as ``wmcp serve`` does."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(weaviate))
    registry, toolset = build_registry(WeaviateSettings(url="http://weaviate:8080"), client=client)
    dispatcher = JsonRpcDispatcher(registry, invoker=Invoker(call_timeout))
    return create_app(dispatcher, sessions=SessionManager(**session_kwargs), resources=[toolset, client])


def asgi_client(app: FastAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://wmcp")
