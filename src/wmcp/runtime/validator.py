"""SchemaValidator: checks ``tools/call`` arguments against a tool's schema.

Built on ``jsonschema`` (Draft 2020-12) with the keywords that reject unknown
properties switched off: adapters accept optional extra fields, so unknown
properties are always tolerated.  Everything else a schema declares is
enforced: ``required``, ``type``, nested ``properties``/``items``, ``enum``
and numeric bounds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jsonschema import Draft202012Validator, SchemaError
from jsonschema.exceptions import best_match
from jsonschema.validators import extend

from wmcp.protocols.errors import SchemaValidationError
from wmcp.registry.errors import InvalidSchemaError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jsonschema.exceptions import ValidationError
    from jsonschema.protocols import Validator

_TolerantValidator = extend(
    Draft202012Validator,
    validators={"additionalProperties": None, "unevaluatedProperties": None},
)


class SchemaValidator:
    """Validates JSON arguments against JSON Schemas.

    Compiled validators are cached per schema object; registry schemas live
    for the whole process so the cache stays small.
    """

    def __init__(self) -> None:
        self._cache: dict[int, tuple[dict[str, Any], Validator]] = {}

    def validate(self, schema: dict[str, Any], arguments: Any) -> None:
        """Raise :class:`SchemaValidationError` if *arguments* violate *schema*."""
        validator = self._compiled(schema)
        error = best_match(validator.iter_errors(arguments))
        if error is not None:
            raise SchemaValidationError(format_path(_error_path(error)), error.message)

    @staticmethod
    def check_schema(schema: dict[str, Any], *, name: str = "") -> None:
        """Raise :class:`InvalidSchemaError` if *schema* is not valid JSON Schema."""
        try:
            _TolerantValidator.check_schema(schema)
        except SchemaError as exc:
            raise InvalidSchemaError(name, exc.message) from exc

    def _compiled(self, schema: dict[str, Any]) -> Validator:
        cached = self._cache.get(id(schema))
        if cached is not None and cached[0] is schema:
            return cached[1]
        validator: Validator = _TolerantValidator(schema)
        self._cache[id(schema)] = (schema, validator)
        return validator


def _error_path(error: ValidationError) -> list[str | int]:
    path: list[str | int] = list(error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, dict):
        missing = [p for p in error.validator_value if p not in error.instance]
        if missing:
            path.append(missing[0])
    return path


def format_path(parts: Iterable[str | int]) -> str:
    """Render a JSON location as ``$.a.b[0].c``."""
    rendered = "$"
    for part in parts:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}"
    return rendered
