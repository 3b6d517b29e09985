"""
String schema implementation.
"""

import re
from typing import Any, Optional, Pattern, Union

from .base import AnySchema, Outcome, State, check_count
from ..api import SchemaError
from ..options import ValidationOptions
from ..reference import Reference

_ALPHANUM = re.compile(r"^[a-zA-Z0-9]+$")
_TOKEN = re.compile(r"^\w+$", re.ASCII)
_HEX = re.compile(r"^[a-fA-F0-9]+$")
# Local part, "@", dotted domain
_EMAIL = re.compile(r"^[^\s@]+@[^\s@.]+(\.[^\s@.]+)+$")


class StringSchema(AnySchema):
    """
    Schema for string values.

    The empty string is rejected unless explicitly allowed with
    ``allow("")``. With conversion enabled, ``lowercase()``, ``uppercase()``
    and ``trim()`` rewrite the value instead of rejecting it.
    """

    _type = "string"

    def __init__(self):
        super().__init__()
        self._invalids.add("")

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        if not isinstance(value, str):
            return Outcome(value, [self.create_error("string.base", None, state, options, value)])

        if options.convert:
            case = self._flags.get("case")
            if case == "lower":
                value = value.lower()
            elif case == "upper":
                value = value.upper()
            if self._flags.get("trim"):
                value = value.strip()
        return Outcome(value)

    def min(self, limit: Union[int, Reference], encoding: Optional[str] = None) -> "StringSchema":
        return self._length_rule("min", limit, encoding, lambda length, limit: length >= limit)

    def max(self, limit: Union[int, Reference], encoding: Optional[str] = None) -> "StringSchema":
        return self._length_rule("max", limit, encoding, lambda length, limit: length <= limit)

    def length(self, limit: Union[int, Reference], encoding: Optional[str] = None) -> "StringSchema":
        return self._length_rule("length", limit, encoding, lambda length, limit: length == limit)

    def regex(self, pattern: Union[str, Pattern], name: Optional[str] = None) -> "StringSchema":
        """
        Require the value to match a regular expression.

        Args:
            pattern: Pattern text or compiled pattern (searched, not fully matched)
            name: Optional pattern name used in the message

        Raises:
            SchemaError: If the pattern does not compile
        """
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as e:
                raise SchemaError(f"Invalid regex pattern {pattern!r}: {e}") from e
        elif not isinstance(pattern, re.Pattern):
            raise SchemaError("Pattern must be a string or compiled regular expression")

        def test(schema, value, state, options):
            if pattern.search(value):
                return None
            if name:
                return schema.create_error("string.regex.name", {"name": name, "pattern": pattern.pattern},
                                           state, options, value)
            return schema.create_error("string.regex.base", {"pattern": pattern.pattern}, state, options, value)

        return self._test("regex", {"pattern": pattern.pattern, "name": name}, test)

    pattern = regex

    def alphanum(self) -> "StringSchema":
        return self._pattern_rule("alphanum", _ALPHANUM)

    def token(self) -> "StringSchema":
        return self._pattern_rule("token", _TOKEN)

    def hex(self) -> "StringSchema":
        return self._pattern_rule("hex", _HEX)

    def email(self) -> "StringSchema":
        return self._pattern_rule("email", _EMAIL)

    def lowercase(self) -> "StringSchema":
        obj = self._test("lowercase", None, _case_test("lowercase", str.lower))
        obj._flags["case"] = "lower"
        return obj

    def uppercase(self) -> "StringSchema":
        obj = self._test("uppercase", None, _case_test("uppercase", str.upper))
        obj._flags["case"] = "upper"
        return obj

    def trim(self) -> "StringSchema":
        obj = self._test("trim", None, _case_test("trim", str.strip))
        obj._flags["trim"] = True
        return obj

    def _length_rule(self, name, limit, encoding, compare) -> "StringSchema":
        if not isinstance(limit, Reference):
            check_count(f"string.{name}", limit)
        if encoding is not None:
            try:
                "".encode(encoding)
            except LookupError as e:
                raise SchemaError(f"Invalid encoding: {encoding}") from e

        def test(schema, value, state, options):
            expected = limit.resolve(state) if isinstance(limit, Reference) else limit
            if isinstance(expected, bool) or not isinstance(expected, int):
                return schema.create_error("string.ref", {"ref": limit.key}, state, options, value)
            length = len(value.encode(encoding)) if encoding else len(value)
            if compare(length, expected):
                return None
            context = {"limit": expected}
            if encoding:
                context["encoding"] = encoding
            return schema.create_error(f"string.{name}", context, state, options, value)

        return self._test(name, limit, test)

    def _pattern_rule(self, name: str, regex: Pattern) -> "StringSchema":
        def test(schema, value, state, options):
            if regex.search(value):
                return None
            return schema.create_error(f"string.{name}", None, state, options, value)

        return self._test(name, None, test)


def _case_test(name, transform):
    # Conversion already rewrote the value in _base
    def test(schema, value, state, options):
        if options.convert or transform(value) == value:
            return None
        return schema.create_error(f"string.{name}", None, state, options, value)
    return test
