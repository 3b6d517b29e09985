"""
Alternatives schema implementation.
"""

from typing import Any, List

from .base import AnySchema, Outcome, State
from ..api import SchemaError
from ..options import ValidationOptions


class AlternativesSchema(AnySchema):
    """
    Schema matching any one of several candidates.

    Candidates are tried in declared order and the first match wins. When
    every candidate fails, the failures of all of them are reported.
    """

    _type = "alternatives"

    def __init__(self):
        super().__init__()
        self._inner = {"matches": []}

    def try_(self, *schemas: Any) -> "AlternativesSchema":
        """
        Add candidate schemas.

        Raises:
            SchemaError: If no candidate is given or one is invalid
        """
        from ..schema_compiler import compile_schema

        candidates: List[Any] = []
        for schema in schemas:
            candidates.extend(schema if isinstance(schema, list) else [schema])
        if not candidates:
            raise SchemaError("Cannot add an empty list of alternatives")

        obj = self.clone()
        for candidate in candidates:
            obj._inner["matches"].append(compile_schema(candidate))
        return obj

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        errors: List[Any] = []
        for schema in self._inner["matches"]:
            result = schema._validate(value, state, options)
            if not result.errors:
                return result
            errors.extend(result.errors)

        if not errors:
            errors.append(self.create_error("alternatives.base", None, state, options, value))
        return Outcome(value, errors)
