"""ToolDescriptor: the registry's unit of record."""

from __future__ import annotations

import copy
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wmcp.protocols.models import ToolListing

Capability = Callable[[dict[str, Any]], Awaitable[Any] | Any]
"""An adapter's execution capability: ``(arguments) -> JSON``.

Coroutine functions are preferred; plain callables are run in a worker
thread by the invoker.
"""


class ToolDescriptor(BaseModel):
    """A named, schema-described tool and the capability that executes it.

    Immutable once built.  ``parameter_schema`` is deep-copied on the way in
    and on the way out so callers can never mutate the registered schema.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    description: str = ""
    parameter_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="parameters",
    )
    capability: Capability = Field(exclude=True, repr=False)

    @field_validator("parameter_schema", mode="after")
    @classmethod
    def _copy_schema(cls, value: dict[str, Any]) -> dict[str, Any]:
        return copy.deepcopy(value)

    @classmethod
    def from_definition(
        cls,
        definition: Mapping[str, Any],
        function: Capability,
    ) -> ToolDescriptor:
        """Build a descriptor from a collaborator's ``{definition, function}`` pair.

        Accepts both the flat ``{name, description, parameters}`` shape and the
        OpenAI-style ``{"type": "function", "function": {...}}`` wrapper.
        """
        body = definition.get("function", definition)
        if not isinstance(body, Mapping):
            msg = "tool definition 'function' must be a mapping"
            raise ValueError(msg)
        return cls(
            name=body.get("name", ""),
            description=body.get("description", ""),
            parameters=body.get("parameters") or {"type": "object", "properties": {}},
            capability=function,
        )

    def input_schema(self) -> dict[str, Any]:
        """Return a private copy of the parameter schema."""
        return copy.deepcopy(self.parameter_schema)

    def to_listing(self) -> ToolListing:
        """Convert to the ``tools/list`` entry shape."""
        return ToolListing(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema(),
        )
