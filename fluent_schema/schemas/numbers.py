"""
Number schema implementation.
"""

import math
import re
from typing import Any, Callable, Union

from .base import AnySchema, Outcome, State, check_count, check_limit
from ..api import SchemaError
from ..options import ValidationOptions
from ..reference import Reference
from ..utils import TypeUtils

_NUMERIC = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$")
_PRECISION = re.compile(r"(?:\.(\d+))?(?:[eE]([+-]?\d+))?$")


def parse_number(text: str) -> Any:
    """
    Parse a numeric string.

    Args:
        text: Candidate string, surrounding whitespace allowed

    Returns:
        int or float, or None when the text is not a finite number
    """
    match = _NUMERIC.match(text)
    if not match:
        return None
    if match.group(2) is None and "." not in match.group(1):
        return int(text)
    number = float(text)
    return number if math.isfinite(number) else None


class NumberSchema(AnySchema):
    """
    Schema for numeric values.

    Booleans and NaN are never numbers. With conversion enabled numeric
    strings are parsed, and ``precision()`` rounds instead of rejecting.
    """

    _type = "number"

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        number = value
        if isinstance(value, str) and options.convert:
            parsed = parse_number(value)
            if parsed is not None:
                number = parsed

        if not TypeUtils.is_number(number):
            return Outcome(value, [self.create_error("number.base", None, state, options, value)])

        if options.convert and "precision" in self._flags and isinstance(number, float) and math.isfinite(number):
            number = round(number, self._flags["precision"])
        return Outcome(number)

    def min(self, limit: Union[int, float, Reference]) -> "NumberSchema":
        return self._compare("min", limit, lambda value, limit: value >= limit)

    def max(self, limit: Union[int, float, Reference]) -> "NumberSchema":
        return self._compare("max", limit, lambda value, limit: value <= limit)

    def greater(self, limit: Union[int, float, Reference]) -> "NumberSchema":
        return self._compare("greater", limit, lambda value, limit: value > limit)

    def less(self, limit: Union[int, float, Reference]) -> "NumberSchema":
        return self._compare("less", limit, lambda value, limit: value < limit)

    def integer(self) -> "NumberSchema":
        def test(schema, value, state, options):
            if isinstance(value, int) or (isinstance(value, float) and value.is_integer()):
                return None
            return schema.create_error("number.integer", None, state, options, value)

        return self._test("integer", None, test)

    def positive(self) -> "NumberSchema":
        def test(schema, value, state, options):
            if value > 0:
                return None
            return schema.create_error("number.positive", None, state, options, value)

        return self._test("positive", None, test)

    def negative(self) -> "NumberSchema":
        def test(schema, value, state, options):
            if value < 0:
                return None
            return schema.create_error("number.negative", None, state, options, value)

        return self._test("negative", None, test)

    def precision(self, limit: int) -> "NumberSchema":
        """Allow at most ``limit`` decimal places."""
        check_count("number.precision", limit)

        def test(schema, value, state, options):
            if _decimal_places(value) <= limit:
                return None
            return schema.create_error("number.precision", {"limit": limit}, state, options, value)

        obj = self._test("precision", limit, test)
        obj._flags["precision"] = limit
        return obj

    def multiple(self, base: Union[int, float]) -> "NumberSchema":
        if not TypeUtils.is_number(base) or base <= 0:
            raise SchemaError("multiple must be a positive number")

        def test(schema, value, state, options):
            if value % base == 0:
                return None
            return schema.create_error("number.multiple", {"multiple": base}, state, options, value)

        return self._test("multiple", base, test)

    def _compare(self, name: str, limit: Any, compare: Callable[[Any, Any], bool]) -> "NumberSchema":
        check_limit(f"number.{name}", limit)

        def test(schema, value, state, options):
            expected = limit
            if isinstance(limit, Reference):
                expected = limit.resolve(state)
                if not TypeUtils.is_number(expected):
                    return schema.create_error("number.ref", {"ref": limit.key}, state, options, value)
            if compare(value, expected):
                return None
            return schema.create_error(f"number.{name}", {"limit": expected}, state, options, value)

        return self._test(name, limit, test)


def _decimal_places(value: Any) -> int:
    if isinstance(value, int) or not math.isfinite(value) or value.is_integer():
        return 0
    match = _PRECISION.search(repr(value))
    fraction = len(match.group(1) or "")
    exponent = int(match.group(2) or 0)
    return max(0, fraction - exponent)
