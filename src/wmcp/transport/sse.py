"""Server-Sent Events framing.

Encoders produce the frames the streaming binding writes; :func:`parse_events`
is their inverse and is what the probe client reads streams with.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator

ENDPOINT_EVENT = "endpoint"
MESSAGE_EVENT = "message"
HEARTBEAT_COMMENT = "ping"


@dataclass(frozen=True)
class ServerSentEvent:
    """One decoded SSE event."""

    event: str = MESSAGE_EVENT
    data: str = ""
    id: str | None = None

    def json(self) -> Any:
        return json.loads(self.data)


def encode_event(event: str, data: str) -> str:
    """Frame *data* as an SSE event; multi-line data becomes several ``data:`` lines."""
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in data.split("\n"))
    return "\n".join(lines) + "\n\n"


def encode_message(message: Any) -> str:
    """Frame a JSON-RPC envelope as a compact ``message`` event."""
    return encode_event(MESSAGE_EVENT, json.dumps(message, separators=(",", ":")))


def encode_endpoint(url: str) -> str:
    return encode_event(ENDPOINT_EVENT, url)


def encode_comment(text: str = HEARTBEAT_COMMENT) -> str:
    return f": {text}\n\n"


async def parse_events(lines: AsyncIterable[str]) -> AsyncIterator[ServerSentEvent]:
    """Decode an SSE stream given as text lines (as from ``Response.aiter_lines``).

    Comment lines are skipped; events without data are not emitted.
    """
    event = MESSAGE_EVENT
    data: list[str] = []
    event_id: str | None = None
    async for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data:
                yield ServerSentEvent(event=event, data="\n".join(data), id=event_id)
            event, data, event_id = MESSAGE_EVENT, [], None
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
        elif name == "id":
            event_id = value
    if data:
        yield ServerSentEvent(event=event, data="\n".join(data), id=event_id)
