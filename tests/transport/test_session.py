"""Tests for SessionManager."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any

import pytest

from wmcp.transport.session import Session, SessionManager, SessionState


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _make_manager(**kwargs: Any) -> tuple[SessionManager, _Clock]:
    clock = _Clock()
    return SessionManager(clock=clock, **kwargs), clock


async def _closed(session: Session) -> None:
    while session.is_open:
        await asyncio.sleep(0.005)


class TestLifecycle:
    def test_create_and_get(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        assert manager.get(session.session_id) is session
        assert session.is_open
        assert session.session_id in manager
        assert len(manager) == 1

    def test_session_ids_are_unique(self) -> None:
        manager, _ = _make_manager()
        ids = {manager.create().session_id for _ in range(50)}
        assert len(ids) == 50

    def test_destroy_is_idempotent(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        assert manager.destroy(session.session_id, "first") is True
        assert manager.destroy(session.session_id, "second") is False
        assert session.state is SessionState.CLOSED
        assert session.close_reason == "first"
        assert manager.get(session.session_id) is None

    def test_destroy_clears_outstanding_and_wakes_stream(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        manager.begin_calls(session, [1, 2])
        manager.destroy(session.session_id, "gone")
        assert not session.outstanding
        assert session.queue.get_nowait() is None

    async def test_destroy_cancels_tasks(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        task = manager.spawn(session, asyncio.sleep(10))
        assert task is not None
        manager.destroy(session.session_id, "gone")
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.tasks == set()

    def test_close_all(self) -> None:
        manager, _ = _make_manager()
        sessions = [manager.create() for _ in range(3)]
        assert manager.close_all() == 3
        assert len(manager) == 0
        assert all(s.close_reason == "server shutdown" for s in sessions)


class TestDelivery:
    def test_deliver_queues_frame_and_clears_ids(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        manager.begin_calls(session, [1, 2])
        assert manager.deliver(session, {"jsonrpc": "2.0", "id": 2, "result": {}}, [2])
        assert session.outstanding == Counter({1: 1})
        assert session.queue.get_nowait().startswith("event: message\n")

    def test_deliver_to_closed_session_is_dropped(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        manager.destroy(session.session_id, "gone")
        session.queue.get_nowait()
        assert manager.deliver(session, {"id": 1}, [1]) is False
        assert session.queue.empty()

    def test_begin_calls_ignored_when_closed(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        manager.destroy(session.session_id, "gone")
        manager.begin_calls(session, [1])
        assert not session.outstanding

    def test_release(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        manager.begin_calls(session, ["a", "b"])
        manager.release(session, ["a"])
        assert session.outstanding == Counter({"b": 1})

    async def test_spawn_on_closed_session_closes_coroutine(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        manager.destroy(session.session_id, "gone")
        coro = asyncio.sleep(0)
        assert manager.spawn(session, coro) is None
        assert coro.cr_frame is None


class TestIdle:
    def test_activity_resets_idle_clock(self) -> None:
        manager, clock = _make_manager(idle_timeout=60)
        session = manager.create()
        clock.now += 59
        assert not manager.is_idle(session)
        clock.now += 1
        assert manager.is_idle(session)
        manager.touch(session)
        assert not manager.is_idle(session)

    def test_outstanding_calls_keep_session_alive(self) -> None:
        manager, clock = _make_manager(idle_timeout=60)
        session = manager.create()
        manager.begin_calls(session, [1])
        clock.now += 600
        assert not manager.is_idle(session)

    def test_sweep_closes_idle_sessions_without_a_stream(self) -> None:
        manager, clock = _make_manager(idle_timeout=60)
        idle = manager.create()
        busy = manager.create()
        manager.begin_calls(busy, ["x"])
        clock.now += 61
        fresh = manager.create()
        assert manager.sweep() == 1
        assert idle.close_reason == "idle timeout"
        assert busy.session_id in manager
        assert fresh.session_id in manager

    async def test_sweeper_runs_periodically(self) -> None:
        manager, clock = _make_manager(heartbeat_interval=0.01, idle_timeout=60)
        session = manager.create()
        clock.now += 61
        sweeper = asyncio.ensure_future(manager.run_sweeper())
        try:
            await asyncio.wait_for(_closed(session), timeout=2)
        finally:
            sweeper.cancel()
            await asyncio.gather(sweeper, return_exceptions=True)
        assert session.session_id not in manager


class TestStream:
    async def test_endpoint_frame_first(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        stream = manager.stream(session)
        first = await anext(stream)
        assert first == f"event: endpoint\ndata: /messages?sessionId={session.session_id}\n\n"
        await stream.aclose()

    async def test_messages_in_queue_order(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        stream = manager.stream(session)
        await anext(stream)
        manager.deliver(session, {"id": "b"})
        manager.deliver(session, {"id": "a"})
        assert '"id":"b"' in await anext(stream)
        assert '"id":"a"' in await anext(stream)
        await stream.aclose()

    async def test_heartbeat_while_not_idle(self) -> None:
        manager, _ = _make_manager(heartbeat_interval=0.01, idle_timeout=60)
        session = manager.create()
        stream = manager.stream(session)
        await anext(stream)
        assert await anext(stream) == ": ping\n\n"
        assert session.is_open
        await stream.aclose()

    async def test_idle_session_closed_by_stream(self) -> None:
        manager, clock = _make_manager(heartbeat_interval=0.01, idle_timeout=60)
        session = manager.create()
        clock.now += 61
        frames = [frame async for frame in manager.stream(session)]
        assert len(frames) == 1
        assert session.close_reason == "idle timeout"
        assert session.session_id not in manager

    async def test_client_disconnect_destroys_session(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        stream = manager.stream(session)
        await anext(stream)
        await stream.aclose()
        assert session.state is SessionState.CLOSED
        assert session.close_reason == "client disconnected"

    async def test_destroy_ends_stream(self) -> None:
        manager, _ = _make_manager()
        session = manager.create()
        stream = manager.stream(session)
        await anext(stream)
        manager.destroy(session.session_id, "server shutdown")
        with pytest.raises(StopAsyncIteration):
            await anext(stream)
        assert session.close_reason == "server shutdown"


def test_session_defaults() -> None:
    session = Session(session_id="s", created_at=0.0, last_activity=0.0)
    assert session.state is SessionState.OPEN
    assert not session.outstanding
