"""StreamingBinding: feeds sideband POST bodies into a session's SSE stream."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from wmcp.protocols.errors import ParseError
from wmcp.protocols.models import JsonRpcResponse, is_valid_id
from wmcp.utils.telemetry import ATTR_SESSION_ID, get_tracer

if TYPE_CHECKING:
    from wmcp.protocols.dispatcher import JsonRpcDispatcher
    from wmcp.transport.session import Session, SessionManager

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


def request_ids(message: Any) -> list[Any]:
    """Ids of the requests in *message* that expect a response."""
    items = message if isinstance(message, list) else [message]
    ids: list[Any] = []
    for item in items:
        if isinstance(item, dict):
            request_id = item.get("id")
            if request_id is not None and is_valid_id(request_id):
                ids.append(request_id)
    return ids


class StreamingBinding:
    """Dispatches bodies posted for a session and delivers replies on its stream.

    Each submitted body is dispatched in its own task, so replies reach the
    stream in completion order rather than submission order.  A parse error
    is delivered immediately.
    """

    def __init__(self, dispatcher: JsonRpcDispatcher, sessions: SessionManager) -> None:
        self._dispatcher = dispatcher
        self._sessions = sessions

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    def submit(self, session: Session, body: bytes | str) -> asyncio.Task[Any] | None:
        """Accept *body* for *session* and schedule its dispatch."""
        self._sessions.touch(session)
        with _tracer.start_as_current_span("wmcp.session.submit") as span:
            span.set_attribute(ATTR_SESSION_ID, session.session_id)
            try:
                message = self._dispatcher.parse(body)
            except ParseError as exc:
                self._sessions.deliver(session, JsonRpcResponse.failure(None, exc).to_wire())
                return None

            ids = request_ids(message)
            self._sessions.begin_calls(session, ids)
            return self._sessions.spawn(session, self._run(session, message, ids))

    async def _run(self, session: Session, message: Any, ids: list[Any]) -> None:
        delivered = False
        try:
            reply = await self._dispatcher.dispatch(message)
            if reply is not None:
                delivered = self._sessions.deliver(session, reply, ids)
        finally:
            if not delivered:
                self._sessions.release(session, ids)
