"""
Fluent entry points for building schemas.

Example:
    schema = object_({
        "name": string().min(3).required(),
        "age": number().integer().min(0),
    }).without("name", "alias")
"""

from typing import Any, Mapping, Optional

from .reference import Reference
from .schemas import (
    AnySchema,
    AlternativesSchema,
    ArraySchema,
    BooleanSchema,
    DateSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
)


def any_() -> AnySchema:
    return AnySchema()


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


bool_ = boolean


def date() -> DateSchema:
    return DateSchema()


def object_(schema: Optional[Mapping[str, Any]] = None) -> ObjectSchema:
    """
    Create an object schema.

    Args:
        schema: Optional mapping of key to schema; without it any key is allowed
    """
    obj = ObjectSchema()
    return obj.keys(schema) if schema is not None else obj


def array() -> ArraySchema:
    return ArraySchema()


def alternatives(*schemas: Any) -> AlternativesSchema:
    obj = AlternativesSchema()
    return obj.try_(*schemas) if schemas else obj


alt = alternatives


def ref(key: str) -> Reference:
    """Create a reference to a sibling value, e.g. ``ref("a.b")``."""
    return Reference(key)


def valid(*values: Any) -> AnySchema:
    return AnySchema().valid(*values)


only = valid
equal = valid


def allow(*values: Any) -> AnySchema:
    return AnySchema().allow(*values)


def invalid(*values: Any) -> AnySchema:
    return AnySchema().invalid(*values)


def forbidden() -> AnySchema:
    return AnySchema().forbidden()


def required() -> AnySchema:
    return AnySchema().required()


def optional() -> AnySchema:
    return AnySchema().optional()
