"""
Compiler turning structural literals into schema nodes.
"""

import datetime
import re
from typing import Any, Mapping

from .api import SchemaError
from .reference import Reference
from .schemas import (
    AnySchema,
    AlternativesSchema,
    BooleanSchema,
    DateSchema,
    NumberSchema,
    ObjectSchema,
    ReferenceSchema,
    StringSchema,
)
from .utils import TypeUtils


class SchemaCompiler:
    """
    Normalizes schema definitions into schema nodes.

    Schema nodes pass through untouched. Literals are compiled as follows:
    a mapping becomes an object schema with those keys, a list becomes
    alternatives, a reference becomes a reference node, a compiled regular
    expression becomes a string schema with that pattern, and a scalar
    becomes a node of the matching kind accepting only that value.
    """

    def compile(self, schema: Any) -> AnySchema:
        """
        Compile a schema definition.

        Args:
            schema: Schema node or structural literal

        Returns:
            The equivalent schema node

        Raises:
            SchemaError: If the definition cannot be interpreted as a schema
        """
        if isinstance(schema, AnySchema):
            return schema
        if isinstance(schema, Mapping):
            return ObjectSchema().keys(schema)
        if isinstance(schema, list):
            return AlternativesSchema().try_(*schema)
        if isinstance(schema, Reference):
            return ReferenceSchema(schema)
        if isinstance(schema, re.Pattern):
            return StringSchema().regex(schema)
        return self._compile_literal(schema)

    def _compile_literal(self, value: Any) -> AnySchema:
        if value is None:
            return AnySchema().valid(None)
        if isinstance(value, bool):
            return BooleanSchema().valid(value)
        if TypeUtils.is_number(value):
            return NumberSchema().valid(value)
        if isinstance(value, str):
            return StringSchema().valid(value)
        if isinstance(value, datetime.date):
            return DateSchema().valid(value)
        raise SchemaError(f"Invalid schema content: {value!r}")


_compiler = SchemaCompiler()


def compile_schema(schema: Any) -> AnySchema:
    """Compile a schema node or structural literal (see SchemaCompiler)."""
    return _compiler.compile(schema)
