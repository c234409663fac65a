"""Tests for ToolDescriptor."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from wmcp.registry import ToolDescriptor


async def _noop(arguments: dict[str, Any]) -> dict[str, Any]:
    return {"ok": True}


class TestToolDescriptor:
    def test_parameters_alias(self) -> None:
        schema = {"type": "object", "properties": {"q": {"type": "string"}}}
        descriptor = ToolDescriptor(name="search", parameters=schema, capability=_noop)
        assert descriptor.parameter_schema == schema

    def test_default_schema_is_empty_object(self) -> None:
        descriptor = ToolDescriptor(name="ping", capability=_noop)
        assert descriptor.parameter_schema == {"type": "object", "properties": {}}

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ToolDescriptor(name="", capability=_noop)

    def test_schema_is_copied_on_construction(self) -> None:
        schema: dict[str, Any] = {"type": "object", "properties": {}}
        descriptor = ToolDescriptor(name="t", parameters=schema, capability=_noop)
        schema["properties"]["injected"] = {"type": "string"}
        assert "injected" not in descriptor.parameter_schema["properties"]

    def test_input_schema_returns_private_copy(self) -> None:
        descriptor = ToolDescriptor(name="t", capability=_noop)
        copy = descriptor.input_schema()
        copy["properties"]["injected"] = {}
        assert descriptor.parameter_schema["properties"] == {}

    def test_frozen(self) -> None:
        descriptor = ToolDescriptor(name="t", capability=_noop)
        with pytest.raises(ValidationError):
            descriptor.name = "other"  # type: ignore[misc]

    def test_capability_excluded_from_dump(self) -> None:
        descriptor = ToolDescriptor(name="t", capability=_noop)
        assert "capability" not in descriptor.model_dump()


class TestFromDefinition:
    def test_function_wrapper(self) -> None:
        definition = {
            "type": "function",
            "function": {
                "name": "check_liveness",
                "description": "Check if the Weaviate application is alive.",
                "parameters": {"type": "object", "properties": {}, "required": []},
            },
        }
        descriptor = ToolDescriptor.from_definition(definition, _noop)
        assert descriptor.name == "check_liveness"
        assert descriptor.description.startswith("Check if")
        assert descriptor.capability is _noop

    def test_flat_definition(self) -> None:
        descriptor = ToolDescriptor.from_definition({"name": "flat", "description": "d"}, _noop)
        assert descriptor.name == "flat"
        assert descriptor.parameter_schema["type"] == "object"

    def test_non_mapping_function_rejected(self) -> None:
        with pytest.raises(ValueError, match="mapping"):
            ToolDescriptor.from_definition({"function": "nope"}, _noop)


class TestToListing:
    def test_wire_shape(self) -> None:
        schema = {"type": "object", "properties": {"id": {"type": "string"}}, "required": ["id"]}
        descriptor = ToolDescriptor(name="get", description="Get it", parameters=schema, capability=_noop)
        assert descriptor.to_listing().to_wire() == {
            "name": "get",
            "description": "Get it",
            "inputSchema": schema,
        }
