"""wmcp: JSON-RPC 2.0 tool server exposing the Weaviate REST API as tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from wmcp.protocols.dispatcher import JsonRpcDispatcher as JsonRpcDispatcher
    from wmcp.registry import ToolDescriptor as ToolDescriptor
    from wmcp.registry import ToolRegistry as ToolRegistry
    from wmcp.tools import build_registry as build_registry
    from wmcp.transport.app import create_app as create_app

_LAZY_EXPORTS = {
    "JsonRpcDispatcher": "wmcp.protocols.dispatcher",
    "ToolDescriptor": "wmcp.registry",
    "ToolRegistry": "wmcp.registry",
    "build_registry": "wmcp.tools",
    "create_app": "wmcp.transport.app",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'wmcp' has no attribute {name!r}")
