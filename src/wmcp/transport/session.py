"""SessionManager: owns every streaming session and its lifecycle.

A session pairs one open SSE stream with the sideband POSTs that feed it.
All mutation of the session table and of a session's bookkeeping goes
through :class:`SessionManager` methods, none of which suspend between
checking and updating state.  :meth:`SessionManager.destroy` is the single
teardown path, whatever triggered it.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from wmcp.transport.sse import encode_comment, encode_endpoint, encode_message

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Coroutine, Iterable

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 15.0
DEFAULT_IDLE_TIMEOUT = 300.0


class SessionState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(eq=False)
class Session:
    """One streaming session.

    ``outstanding`` counts, per id, the requests dispatched on this session
    whose responses have not been delivered yet.  Clients may reuse an id
    while an earlier call with it is still running, so it is a multiset.  The queue carries encoded
    SSE frames; ``None`` wakes the stream for shutdown.
    """

    session_id: str
    created_at: float
    last_activity: float
    outstanding: Counter[Any] = field(default_factory=Counter)
    state: SessionState = SessionState.OPEN
    close_reason: str | None = None
    queue: asyncio.Queue[str | None] = field(default_factory=asyncio.Queue, repr=False)
    tasks: set[asyncio.Task[Any]] = field(default_factory=set, repr=False)

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN


class SessionManager:
    """Creates, tracks and tears down streaming sessions.

    Usage::

        sessions = SessionManager(heartbeat_interval=15.0, idle_timeout=300.0)
        session = sessions.create()

        sessions.begin_calls(session, [1, 2])
        sessions.spawn(session, run_dispatch(...))
        sessions.deliver(session, {"jsonrpc": "2.0", "id": 2, ...}, [2])

        async for frame in sessions.stream(session):   # endpoint, messages, pings
            ...
    """

    def __init__(
        self,
        *,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._heartbeat_interval = heartbeat_interval
        self._idle_timeout = idle_timeout
        self._clock = clock

    @property
    def heartbeat_interval(self) -> float:
        return self._heartbeat_interval

    @property
    def idle_timeout(self) -> float:
        return self._idle_timeout

    def create(self) -> Session:
        now = self._clock()
        session = Session(session_id=uuid.uuid4().hex, created_at=now, last_activity=now)
        self._sessions[session.session_id] = session
        logger.info("Session %s opened (%d open)", session.session_id, len(self._sessions))
        return session

    def get(self, session_id: str) -> Session | None:
        """Return the open session with *session_id*, if any."""
        return self._sessions.get(session_id)

    def touch(self, session: Session) -> None:
        """Record client activity on *session*."""
        session.last_activity = self._clock()

    def begin_calls(self, session: Session, ids: Iterable[Any]) -> None:
        if session.is_open:
            session.outstanding.update(ids)

    def deliver(self, session: Session, message: Any, ids: Iterable[Any] = ()) -> bool:
        """Queue *message* on the session's stream; ``False`` if it was dropped."""
        if not session.is_open:
            logger.debug("Dropping delivery for closed session %s", session.session_id)
            return False
        session.queue.put_nowait(encode_message(message))
        _forget(session, ids)
        return True

    def release(self, session: Session, ids: Iterable[Any]) -> None:
        """Forget *ids* without delivering anything (notifications, cancelled calls)."""
        _forget(session, ids)

    def spawn(self, session: Session, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any] | None:
        """Run *coro* as a task owned by *session*; it is cancelled on teardown."""
        if not session.is_open:
            coro.close()
            return None
        task = asyncio.ensure_future(coro)
        session.tasks.add(task)
        task.add_done_callback(session.tasks.discard)
        return task

    def destroy(self, session_id: str, reason: str) -> bool:
        """Tear down a session.  Idempotent; only the first caller gets ``True``."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.state = SessionState.CLOSED
        session.close_reason = reason
        session.outstanding.clear()
        for task in list(session.tasks):
            task.cancel()
        session.queue.put_nowait(None)
        logger.info("Session %s closed: %s", session_id, reason)
        return True

    def is_idle(self, session: Session) -> bool:
        """Idle means no client activity for ``idle_timeout`` and nothing in flight."""
        if session.outstanding:
            return False
        return self._clock() - session.last_activity >= self._idle_timeout

    async def stream(self, session: Session, endpoint: str = "/messages") -> AsyncIterator[str]:
        """Yield the session's SSE frames until it is closed.

        The first frame announces the sideband endpoint.  A ``: ping``
        comment is emitted after every ``heartbeat_interval`` without
        traffic.  Leaving the iterator (client disconnect, write failure)
        destroys the session.
        """
        reason = "client disconnected"
        try:
            yield encode_endpoint(f"{endpoint}?sessionId={session.session_id}")
            while session.is_open:
                try:
                    frame = await asyncio.wait_for(session.queue.get(), timeout=self._heartbeat_interval)
                except TimeoutError:
                    if self.is_idle(session):
                        reason = "idle timeout"
                        break
                    yield encode_comment()
                    continue
                if frame is None:
                    break
                yield frame
        finally:
            self.destroy(session.session_id, reason)

    def sweep(self) -> int:
        """Destroy every idle session, streamed or not; returns how many were closed.

        Catches sessions whose stream was never consumed, which the stream
        loop cannot see.
        """
        closed = 0
        for session in list(self._sessions.values()):
            if self.is_idle(session) and self.destroy(session.session_id, "idle timeout"):
                closed += 1
        return closed

    async def run_sweeper(self) -> None:
        """Call :meth:`sweep` every ``heartbeat_interval`` until cancelled."""
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            closed = self.sweep()
            if closed:
                logger.debug("Swept %d idle session(s)", closed)

    def close_all(self, reason: str = "server shutdown") -> int:
        """Destroy every open session; returns how many were closed."""
        closed = 0
        for session_id in list(self._sessions):
            if self.destroy(session_id, reason):
                closed += 1
        return closed

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


def _forget(session: Session, ids: Iterable[Any]) -> None:
    for request_id in ids:
        remaining = session.outstanding[request_id] - 1
        if remaining > 0:
            session.outstanding[request_id] = remaining
        else:
            session.outstanding.pop(request_id, None)
