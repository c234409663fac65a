"""Weaviate endpoint declarations.

A :class:`WeaviateEndpoint` describes one REST call against the Weaviate
``/v1`` API: where the tool arguments go (path, query string, body) and how
the response is turned into a JSON result.
"""

from __future__ import annotations

import copy
from string import Formatter
from typing import Any, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, model_validator

from wmcp.runtime.errors import AdapterCallError

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]
ResponseMode = Literal["json", "text", "exists", "deleted"]


def _empty_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


class WeaviateEndpoint(BaseModel):
    """Definition of a Weaviate REST tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    method: HttpMethod = "GET"
    path: str
    parameters: dict[str, Any] = _empty_schema()
    query: dict[str, str] = {}
    fixed_query: dict[str, str] = {}
    headers: dict[str, str] = {}
    defaults: dict[str, Any] = {}
    body_argument: str | None = None
    body_fields: dict[str, str] = {}
    body_template: dict[str, Any] | None = None
    response: ResponseMode = "json"

    @model_validator(mode="after")
    def _check_mapping(self) -> WeaviateEndpoint:
        if self.body_argument and self.body_fields:
            msg = f"{self.name}: body_argument and body_fields are mutually exclusive"
            raise ValueError(msg)
        declared = set(self.parameters.get("properties", {}))
        for argument in self.path_arguments():
            if argument not in declared:
                msg = f"{self.name}: path argument '{argument}' is not a declared parameter"
                raise ValueError(msg)
        return self

    def path_arguments(self) -> list[str]:
        return [field for _, field, _, _ in Formatter().parse(self.path) if field]

    def render_path(self, arguments: dict[str, Any]) -> str:
        """Substitute ``{arg}`` segments with URL-encoded argument values."""
        values: dict[str, str] = {}
        for argument in self.path_arguments():
            value = arguments.get(argument)
            if value is None:
                raise AdapterCallError(f"missing path argument '{argument}' for {self.name}")
            values[argument] = quote(str(value), safe="")
        return self.path.format(**values)

    def render_query(self, arguments: dict[str, Any]) -> dict[str, Any]:
        params: dict[str, Any] = dict(self.fixed_query)
        for key, argument in self.query.items():
            value = arguments.get(argument)
            if value is not None:
                params[key] = value
        return params

    def render_body(self, arguments: dict[str, Any]) -> Any:
        """Build the JSON body, or ``None`` when the call carries none."""
        if self.body_argument:
            return arguments.get(self.body_argument)
        if not self.body_fields and self.body_template is None:
            return None
        body: dict[str, Any] = copy.deepcopy(self.body_template) if self.body_template else {}
        for key, argument in self.body_fields.items():
            value = arguments.get(argument)
            if value is None:
                continue
            target = body
            *parents, leaf = key.split(".")
            for parent in parents:
                target = target.setdefault(parent, {})
            target[leaf] = value
        return body

    def to_definition(self) -> dict[str, Any]:
        """Function-style tool definition (``{"type": "function", "function": {...}}``)."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": copy.deepcopy(self.parameters),
            },
        }
