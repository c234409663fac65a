"""Tool registry: descriptors and the startup-built catalog."""

from wmcp.registry.errors import (
    DuplicateToolError,
    InvalidSchemaError,
    RegistryError,
    RegistryFrozenError,
)
from wmcp.registry.models import Capability, ToolDescriptor
from wmcp.registry.registry import ToolRegistry

__all__ = [
    "Capability",
    "DuplicateToolError",
    "InvalidSchemaError",
    "RegistryError",
    "RegistryFrozenError",
    "ToolDescriptor",
    "ToolRegistry",
]
