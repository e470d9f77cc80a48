"""
Validation of parsed model replies against the result contracts.

Validation returns a new dict holding only the declared fields. It is pure
and idempotent: validating an already validated result returns an equal
result. The first failing field, in declaration order, decides the error.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, NoReturn

from pydantic import BaseModel, ValidationError as PydanticValidationError

from medtools.pipeline.core.exceptions import (
    InsufficientItemsError,
    InvalidFieldTypeError,
    InvalidFieldValueError,
    MissingFieldError,
    OutOfRangeError,
)
from medtools.pipeline.processors.llm_response import extract_json_object

ResultSchema = type[BaseModel]

_EXPECTED_TYPES = {
    "string_type": "string",
    "number_type": "number",
    "int_type": "number",
    "float_type": "number",
    "list_type": "array",
    "model_type": "object",
    "model_attributes_type": "object",
    "dict_type": "object",
}

_RANGE_ERRORS = {"greater_than_equal", "less_than_equal", "greater_than", "less_than"}


def _field_path(loc: tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "$"


def _raise_output_error(exc: PydanticValidationError, schema: ResultSchema) -> NoReturn:
    error = exc.errors()[0]
    error_type = error["type"]
    path = _field_path(error["loc"])
    value = error.get("input")
    ctx = error.get("ctx") or {}

    if error_type == "missing" or value is None:
        raise MissingFieldError(path) from exc
    if error_type in _RANGE_ERRORS:
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidFieldValueError(path, value) from exc
        raise OutOfRangeError(path, value, *_bounds(schema, error["loc"], ctx)) from exc
    if error_type == "too_short":
        raise InsufficientItemsError(
            path, ctx.get("actual_length", len(value)), ctx["min_length"]
        ) from exc
    if error_type.endswith("_type"):
        raise InvalidFieldTypeError(path, _EXPECTED_TYPES.get(error_type, error_type)) from exc
    raise InvalidFieldValueError(path, value) from exc


def _bounds(schema: ResultSchema, loc: tuple[Any, ...], ctx: Mapping[str, Any]) -> tuple[Any, Any]:
    """Both range limits of the field at ``loc``; the error only carries the one it broke."""
    model: Any = schema
    field = None
    for part in loc:
        if isinstance(part, int) or model is None:
            continue
        field = model.model_fields.get(part)
        if field is None:
            break
        model = _nested_model(field.annotation)

    minimum, maximum = ctx.get("ge"), ctx.get("le")
    if field is not None:
        for constraint in field.metadata:
            minimum = getattr(constraint, "ge", minimum)
            maximum = getattr(constraint, "le", maximum)
    return minimum, maximum


def _nested_model(annotation: Any) -> Any:
    for arg in getattr(annotation, "__args__", ()):
        if isinstance(arg, type) and issubclass(arg, BaseModel):
            return arg
    return None


def validate(data: Mapping[str, Any], schema: ResultSchema) -> dict[str, Any]:
    """Validate a parsed model reply against a result model.

    Args:
        data: JSON object extracted from the model reply
        schema: Result model class

    Returns:
        New dict with only the declared fields, long lists truncated and
        absent optional fields omitted

    Raises:
        LLMOutputError: One of its subclasses, naming the offending field
    """
    try:
        result = schema.model_validate(data)
    except PydanticValidationError as exc:
        _raise_output_error(exc, schema)
    return result.model_dump(exclude_none=True)


def parse_and_validate(raw_text: str, schema: ResultSchema) -> dict[str, Any]:
    """Extract the JSON object from a reply and validate it."""
    return validate(extract_json_object(raw_text), schema)
