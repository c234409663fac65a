"""Built-in Weaviate tools and the startup composition helper."""

from __future__ import annotations

from typing import TYPE_CHECKING

from wmcp.registry.registry import ToolRegistry
from wmcp.tools.catalog import CATALOG
from wmcp.tools.executor import WeaviateToolset
from wmcp.tools.models import WeaviateEndpoint

if TYPE_CHECKING:
    import httpx

    from wmcp.config import WeaviateSettings

__all__ = ["CATALOG", "WeaviateEndpoint", "WeaviateToolset", "build_registry"]


def build_registry(
    settings: WeaviateSettings,
    *,
    client: httpx.AsyncClient | None = None,
) -> tuple[ToolRegistry, WeaviateToolset]:
    """Register every catalog tool.

    Returns the (not yet frozen) registry and the toolset that owns the HTTP
    client; the caller closes the toolset at shutdown.
    """
    toolset = WeaviateToolset(settings, client=client)
    registry = ToolRegistry.from_descriptors(toolset.descriptors())
    return registry, toolset
