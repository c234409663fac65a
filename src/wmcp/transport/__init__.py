"""HTTP transports: request/response POST and Server-Sent Events sessions."""

from wmcp.transport.app import SESSION_HEADER, create_app
from wmcp.transport.session import Session, SessionManager, SessionState
from wmcp.transport.sse import ServerSentEvent, encode_comment, encode_event, encode_message, parse_events
from wmcp.transport.streaming import StreamingBinding

__all__ = [
    "SESSION_HEADER",
    "ServerSentEvent",
    "Session",
    "SessionManager",
    "SessionState",
    "StreamingBinding",
    "create_app",
    "encode_comment",
    "encode_event",
    "encode_message",
    "parse_events",
]
