"""
Array schema implementation.
"""

import json
from typing import Any, Callable, List

from .base import AnySchema, Outcome, State, check_count
from ..options import ValidationOptions
from ..utils import MISSING, TypeUtils


class ArraySchema(AnySchema):
    """
    Schema for lists.

    Items are matched against the candidate item schemas left to right.
    Tuples are accepted and returned as lists; with conversion enabled a
    JSON string holding an array is parsed first.
    """

    _type = "array"

    def __init__(self):
        super().__init__()
        self._inner = {
            "inclusions": [],
            "exclusions": [],
        }

    def items(self, *schemas: Any) -> "ArraySchema":
        """
        Add candidate item schemas.

        An item is valid when at least one candidate accepts it. Candidates
        marked ``forbidden()`` instead reject every item they match.
        """
        from ..schema_compiler import compile_schema

        obj = self.clone()
        for schema in schemas:
            candidates = schema if isinstance(schema, list) else [schema]
            for candidate in candidates:
                compiled = compile_schema(candidate)
                if compiled.flags.get("presence") == "forbidden":
                    obj._inner["exclusions"].append(compiled.optional())
                else:
                    obj._inner["inclusions"].append(compiled)
        return obj

    def single(self, enabled: bool = True) -> "ArraySchema":
        """Accept a lone value in place of a one-item list."""
        return self._set_flag("single", enabled)

    def min(self, limit: int) -> "ArraySchema":
        return self._count("min", limit, lambda count, limit: count >= limit)

    def max(self, limit: int) -> "ArraySchema":
        return self._count("max", limit, lambda count, limit: count <= limit)

    def length(self, limit: int) -> "ArraySchema":
        return self._count("length", limit, lambda count, limit: count == limit)

    def unique(self) -> "ArraySchema":
        def test(schema, value, state, options):
            for index, item in enumerate(value):
                for previous in value[:index]:
                    if TypeUtils.same_value(previous, item):
                        local = State(state.key, state.path + (index,), state.parent, state.reference)
                        return schema.create_error("array.unique", {"pos": index}, local, options, item)
            return None

        return self._test("unique", None, test)

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        target = value
        if isinstance(value, str) and options.convert:
            try:
                target = json.loads(value)
            except ValueError:
                pass

        if isinstance(target, tuple):
            target = list(target)
        elif not isinstance(target, list):
            if self._flags.get("single") and options.convert:
                target = [target]
            else:
                return Outcome(value, [self.create_error("array.base", None, state, options, value)])

        if not self._inner["inclusions"] and not self._inner["exclusions"]:
            return Outcome(target)

        if target is value:
            target = list(value)
        errors = self._check_items(target, state, options)
        return Outcome(target, errors or None)

    def _check_items(self, items: List[Any], state: State, options: ValidationOptions) -> List[Any]:
        errors: List[Any] = []
        stripped: List[int] = []
        inclusions = self._inner["inclusions"]

        for index, item in enumerate(items):
            item_state = state.child(index, state.parent)
            report_state = State(state.key, item_state.path, state.parent, state.reference)

            excluded = False
            for exclusion in self._inner["exclusions"]:
                if not exclusion._validate(item, item_state, ValidationOptions()).errors:
                    errors.append(self.create_error("array.excludes", {"pos": index}, report_state, options, item))
                    excluded = True
                    break
            if excluded:
                if options.abort_early:
                    break
                continue

            if not inclusions:
                continue

            last_errors = None
            for inclusion in inclusions:
                result = inclusion._validate(item, item_state, options)
                if not result.errors:
                    if result.value is MISSING:
                        stripped.append(index)
                    else:
                        items[index] = result.value
                    break
                last_errors = result.errors
            else:
                if len(inclusions) == 1:
                    errors.append(self.create_error("array.includesOne", {"pos": index, "reason": last_errors},
                                                    report_state, options, item))
                else:
                    errors.append(self.create_error("array.includes", {"pos": index}, report_state, options, item))
                if options.abort_early:
                    break

        for index in reversed(stripped):
            del items[index]
        return errors

    def _count(self, name: str, limit: int, compare: Callable[[int, int], bool]) -> "ArraySchema":
        check_count(f"array.{name}", limit)

        def test(schema, value, state, options):
            if compare(len(value), limit):
                return None
            return schema.create_error(f"array.{name}", {"limit": limit}, state, options, value)

        return self._test(name, limit, test)
