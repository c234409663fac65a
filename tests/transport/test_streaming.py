"""Tests for StreamingBinding: ordering and bookkeeping of sideband submissions."""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from typing import Any

from wmcp.protocols.dispatcher import JsonRpcDispatcher
from wmcp.registry import ToolDescriptor, ToolRegistry
from wmcp.transport.session import Session, SessionManager
from wmcp.transport.streaming import StreamingBinding, request_ids


def _make_binding(*descriptors: ToolDescriptor) -> tuple[StreamingBinding, SessionManager]:
    registry = ToolRegistry.from_descriptors(descriptors)
    sessions = SessionManager()
    return StreamingBinding(JsonRpcDispatcher(registry), sessions), sessions


def _call(request_id: Any, name: str) -> str:
    return json.dumps(
        {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": {"name": name, "arguments": {}}}
    )


async def _next_message(session: Session) -> Any:
    frame = await asyncio.wait_for(session.queue.get(), timeout=2)
    assert frame is not None
    event, data = frame.strip().split("\n", 1)
    assert event == "event: message"
    return json.loads(data.removeprefix("data: "))


class TestRequestIds:
    def test_single(self) -> None:
        assert request_ids({"id": 4}) == [4]

    def test_notification(self) -> None:
        assert request_ids({"method": "ping"}) == []

    def test_batch_skips_invalid(self) -> None:
        assert request_ids([{"id": 1}, {"id": None}, {"id": True}, "x", {"id": "b"}]) == [1, "b"]


class TestSubmit:
    async def test_reply_delivered_on_stream(self) -> None:
        binding, sessions = _make_binding()
        session = sessions.create()
        task = binding.submit(session, json.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"}))
        assert task is not None
        assert await _next_message(session) == {"jsonrpc": "2.0", "id": 1, "result": {}}
        await task
        assert not session.outstanding

    async def test_completion_order_not_submission_order(self) -> None:
        gate = asyncio.Event()

        async def slow(arguments: dict[str, Any]) -> str:
            await gate.wait()
            return "slow"

        async def fast(arguments: dict[str, Any]) -> str:
            return "fast"

        binding, sessions = _make_binding(
            ToolDescriptor(name="slow", capability=slow),
            ToolDescriptor(name="fast", capability=fast),
        )
        session = sessions.create()
        binding.submit(session, _call(1, "slow"))
        binding.submit(session, _call(2, "fast"))
        assert session.outstanding == Counter({1: 1, 2: 1})

        first = await _next_message(session)
        assert first["id"] == 2
        assert first["result"] == "fast"
        assert session.outstanding == Counter({1: 1})

        gate.set()
        second = await _next_message(session)
        assert second == {"jsonrpc": "2.0", "id": 1, "result": "slow"}
        assert not session.outstanding

    async def test_reused_id_stays_outstanding_until_both_delivered(self) -> None:
        gate = asyncio.Event()

        async def slow(arguments: dict[str, Any]) -> str:
            await gate.wait()
            return "slow"

        async def fast(arguments: dict[str, Any]) -> str:
            return "fast"

        binding, sessions = _make_binding(
            ToolDescriptor(name="slow", capability=slow),
            ToolDescriptor(name="fast", capability=fast),
        )
        session = sessions.create()
        binding.submit(session, _call(7, "slow"))
        binding.submit(session, _call(7, "fast"))
        assert session.outstanding == Counter({7: 2})

        first = await _next_message(session)
        assert first["result"] == "fast"
        assert session.outstanding == Counter({7: 1})

        gate.set()
        second = await _next_message(session)
        assert second == {"jsonrpc": "2.0", "id": 7, "result": "slow"}
        assert not session.outstanding

    async def test_parse_error_delivered_immediately(self) -> None:
        binding, sessions = _make_binding()
        session = sessions.create()
        assert binding.submit(session, b"{broken") is None
        message = await _next_message(session)
        assert message["error"]["code"] == -32700
        assert message["id"] is None

    async def test_notification_releases_nothing_delivered(self) -> None:
        binding, sessions = _make_binding()
        session = sessions.create()
        task = binding.submit(session, json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}))
        assert task is not None
        await task
        assert session.queue.empty()

    async def test_batch_delivered_as_one_message(self) -> None:
        binding, sessions = _make_binding()
        session = sessions.create()
        body = json.dumps(
            [
                {"jsonrpc": "2.0", "id": 1, "method": "ping"},
                {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            ]
        )
        binding.submit(session, body)
        message = await _next_message(session)
        assert sorted(m["id"] for m in message) == [1, 2]

    async def test_submit_refreshes_activity(self) -> None:
        binding, sessions = _make_binding()
        session = sessions.create()
        session.last_activity = 0.0
        task = binding.submit(session, json.dumps({"jsonrpc": "2.0", "method": "ping"}))
        assert session.last_activity > 0.0
        assert task is not None
        await task

    async def test_closed_session_discards_late_reply(self) -> None:
        gate = asyncio.Event()

        async def slow(arguments: dict[str, Any]) -> str:
            await gate.wait()
            return "late"

        binding, sessions = _make_binding(ToolDescriptor(name="slow", capability=slow))
        session = sessions.create()
        task = binding.submit(session, _call(1, "slow"))
        assert task is not None
        await asyncio.sleep(0)
        sessions.destroy(session.session_id, "client disconnected")
        await asyncio.gather(task, return_exceptions=True)
        assert task.cancelled()
        assert session.queue.get_nowait() is None
        assert session.queue.empty()

    async def test_submit_to_closed_session_is_ignored(self) -> None:
        binding, sessions = _make_binding()
        session = sessions.create()
        sessions.destroy(session.session_id, "gone")
        assert binding.submit(session, json.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"})) is None
