"""ToolRegistry: immutable catalog of the tools the server exposes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wmcp.protocols.errors import ToolNotFoundError
from wmcp.registry.errors import DuplicateToolError, RegistryFrozenError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from wmcp.registry.models import ToolDescriptor

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Maintains an ordered name-to-descriptor map.

    Registration happens once at startup; :meth:`freeze` is called when the
    HTTP application is built and every later :meth:`register` fails.
    Listing order is registration order and is stable for the process
    lifetime.

    Usage::

        registry = ToolRegistry()
        registry.register(descriptor)
        registry.freeze()

        registry.lookup("check_liveness")   # -> ToolDescriptor
        registry.list()                      # ordered descriptors
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._frozen = False

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[ToolDescriptor]) -> ToolRegistry:
        registry = cls()
        for descriptor in descriptors:
            registry.register(descriptor)
        return registry

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, descriptor: ToolDescriptor) -> None:
        """Add *descriptor*; its name must be new and its schema valid."""
        if self._frozen:
            raise RegistryFrozenError(descriptor.name)
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)
        from wmcp.runtime.validator import SchemaValidator

        SchemaValidator.check_schema(descriptor.parameter_schema, name=descriptor.name)
        self._tools[descriptor.name] = descriptor
        logger.debug("Registered tool %s", descriptor.name)

    def freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            logger.info("Tool registry frozen with %d tool(s)", len(self._tools))

    def lookup(self, name: str) -> ToolDescriptor:
        """Return the descriptor for *name* or raise :class:`ToolNotFoundError`."""
        descriptor = self._tools.get(name)
        if descriptor is None:
            raise ToolNotFoundError(name)
        return descriptor

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def list(self) -> list[ToolDescriptor]:
        """Return all descriptors in registration order."""
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self.list())
