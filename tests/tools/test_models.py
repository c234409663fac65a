"""Tests for WeaviateEndpoint argument mapping."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from wmcp.runtime.errors import AdapterCallError
from wmcp.tools.models import WeaviateEndpoint


def _make_endpoint(**overrides: object) -> WeaviateEndpoint:
    fields: dict[str, object] = {
        "name": "get_object",
        "path": "/objects/{className}/{id}",
        "parameters": {
            "type": "object",
            "properties": {
                "className": {"type": "string"},
                "id": {"type": "string"},
                "tenant": {"type": "string"},
            },
            "required": ["className", "id"],
        },
    }
    fields.update(overrides)
    return WeaviateEndpoint.model_validate(fields)


class TestValidation:
    def test_undeclared_path_argument_rejected(self) -> None:
        with pytest.raises(ValidationError, match="path argument 'id'"):
            WeaviateEndpoint(name="bad", path="/objects/{id}")

    def test_body_argument_and_fields_exclusive(self) -> None:
        with pytest.raises(ValidationError, match="mutually exclusive"):
            _make_endpoint(body_argument="data", body_fields={"a": "b"})

    def test_frozen(self) -> None:
        endpoint = _make_endpoint()
        with pytest.raises(ValidationError):
            endpoint.path = "/other"  # type: ignore[misc]


class TestRenderPath:
    def test_path_arguments(self) -> None:
        assert _make_endpoint().path_arguments() == ["className", "id"]

    def test_values_are_url_encoded(self) -> None:
        path = _make_endpoint().render_path({"className": "My Class", "id": "a/b?c"})
        assert path == "/objects/My%20Class/a%2Fb%3Fc"

    def test_missing_argument(self) -> None:
        with pytest.raises(AdapterCallError, match="missing path argument 'id'"):
            _make_endpoint().render_path({"className": "Article"})


class TestRenderQuery:
    def test_fixed_and_mapped(self) -> None:
        endpoint = _make_endpoint(query={"tenant": "tenant"}, fixed_query={"consistency_level": "QUORUM"})
        assert endpoint.render_query({"tenant": "t1"}) == {"consistency_level": "QUORUM", "tenant": "t1"}

    def test_absent_optional_omitted(self) -> None:
        endpoint = _make_endpoint(query={"tenant": "tenant"})
        assert endpoint.render_query({"tenant": None}) == {}


class TestRenderBody:
    def test_no_body(self) -> None:
        assert _make_endpoint().render_body({"className": "A", "id": "1"}) is None

    def test_body_argument(self) -> None:
        endpoint = _make_endpoint(body_argument="data")
        assert endpoint.render_body({"data": {"properties": {"x": 1}}}) == {"properties": {"x": 1}}

    def test_dotted_fields_and_template(self) -> None:
        endpoint = _make_endpoint(
            body_fields={"match.class": "cls", "match.where": "where", "note": "note"},
            body_template={"output": "minimal", "dryRun": False},
        )
        body = endpoint.render_body({"cls": "Article", "where": {"path": ["id"]}})
        assert body == {
            "output": "minimal",
            "dryRun": False,
            "match": {"class": "Article", "where": {"path": ["id"]}},
        }

    def test_template_is_not_mutated(self) -> None:
        endpoint = _make_endpoint(body_fields={"a": "a"}, body_template={"fixed": True})
        endpoint.render_body({"a": 1})
        assert endpoint.body_template == {"fixed": True}


class TestToDefinition:
    def test_function_shape(self) -> None:
        definition = _make_endpoint(description="Get it").to_definition()
        assert definition["type"] == "function"
        assert definition["function"]["name"] == "get_object"
        assert definition["function"]["parameters"]["required"] == ["className", "id"]
