"""HTTP application: request/response and SSE bindings over one dispatcher.

Routes:

- ``POST /messages``: JSON-RPC request/response.  With a ``sessionId``
  query parameter (or ``Mcp-Session-Id`` header) the body is a sideband
  submission for an open SSE session instead, answered with ``202``.
- ``GET /sse``: opens a streaming session.
- ``POST /sse``: opens a streaming session and dispatches the body on it.
- ``GET /health``: liveness and basic counters.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from wmcp.protocols.errors import InvalidRequestError
from wmcp.protocols.models import JsonRpcResponse
from wmcp.transport.session import SessionManager
from wmcp.transport.streaming import StreamingBinding

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from wmcp.protocols.dispatcher import JsonRpcDispatcher
    from wmcp.transport.session import Session

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"
SESSION_QUERY_PARAM = "sessionId"
MESSAGES_PATH = "/messages"

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class AsyncCloseable(Protocol):
    async def aclose(self) -> None: ...


def create_app(
    dispatcher: JsonRpcDispatcher,
    *,
    sessions: SessionManager | None = None,
    resources: Sequence[AsyncCloseable] = (),
    title: str = "Weaviate MCP Server",
) -> FastAPI:
    """Build the FastAPI application serving *dispatcher*.

    Freezes the dispatcher's registry: no tool can be registered once the
    application exists.  On shutdown every open session is closed, then each
    of *resources* is closed.
    """
    sessions = sessions or SessionManager()
    binding = StreamingBinding(dispatcher, sessions)
    dispatcher.registry.freeze()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Serving %d tool(s)", len(dispatcher.registry))
        sweeper = asyncio.ensure_future(sessions.run_sweeper())
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            closed = sessions.close_all()
            if closed:
                logger.info("Closed %d session(s) at shutdown", closed)
            for resource in resources:
                await resource.aclose()

    app = FastAPI(title=title, lifespan=lifespan)
    app.state.dispatcher = dispatcher
    app.state.sessions = sessions
    app.state.binding = binding

    def open_stream(session: Session) -> StreamingResponse:
        return StreamingResponse(
            sessions.stream(session, endpoint=MESSAGES_PATH),
            media_type="text/event-stream",
            headers={**_SSE_HEADERS, SESSION_HEADER: session.session_id},
        )

    @app.post(MESSAGES_PATH)
    async def post_messages(request: Request) -> Response:
        body = await request.body()
        session_id = request.query_params.get(SESSION_QUERY_PARAM) or request.headers.get(SESSION_HEADER)
        if session_id:
            session = sessions.get(session_id)
            if session is None:
                error = InvalidRequestError("unknown or closed session")
                return JSONResponse(JsonRpcResponse.failure(None, error).to_wire(), status_code=404)
            binding.submit(session, body)
            return Response(status_code=202)

        reply = await dispatcher.handle_payload(body)
        if reply is None:
            return Response(status_code=202)
        return JSONResponse(reply)

    @app.get("/sse")
    async def get_sse() -> StreamingResponse:
        return open_stream(sessions.create())

    @app.post("/sse")
    async def post_sse(request: Request) -> StreamingResponse:
        body = await request.body()
        session = sessions.create()
        binding.submit(session, body)
        return open_stream(session)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "tools": len(dispatcher.registry), "sessions": len(sessions)}

    return app
