"""
Date schema implementation.
"""

import datetime
from typing import Any, Callable, Optional, Union

from .base import AnySchema, Outcome, State
from .numbers import parse_number
from ..api import SchemaError
from ..options import ValidationOptions
from ..reference import Reference
from ..utils import TypeUtils

DateLimit = Union[datetime.date, datetime.datetime, int, float, str, Reference]


def from_milliseconds(value: Any) -> Optional[datetime.datetime]:
    """Convert milliseconds since the epoch to an aware UTC datetime."""
    try:
        return datetime.datetime.fromtimestamp(value / 1000, datetime.timezone.utc)
    except (OverflowError, ValueError, OSError):
        return None


def to_datetime(value: Any, convert: bool = True) -> Optional[datetime.datetime]:
    """
    Interpret a value as a point in time.

    Naive datetimes and plain dates are taken to be UTC. When ``convert``
    is set, numbers (and numeric strings) are read as milliseconds since
    the epoch and other strings as ISO 8601.

    Args:
        value: Candidate value
        convert: Allow numbers and strings

    Returns:
        Aware datetime, or None when the value is not a date
    """
    if isinstance(value, datetime.datetime):
        return value if value.tzinfo else value.replace(tzinfo=datetime.timezone.utc)
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day, tzinfo=datetime.timezone.utc)
    if not convert:
        return None
    if TypeUtils.is_number(value):
        return from_milliseconds(value)
    if isinstance(value, str):
        number = parse_number(value)
        if number is not None:
            return from_milliseconds(number)
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_datetime(datetime.datetime.fromisoformat(text), convert=False)
        except ValueError:
            return None
    return None


class DateSchema(AnySchema):
    """Schema for dates and datetimes."""

    _type = "date"

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        if isinstance(value, datetime.date):
            return Outcome(value)
        converted = to_datetime(value, options.convert)
        if converted is None:
            return Outcome(value, [self.create_error("date.base", None, state, options, value)])
        return Outcome(converted)

    def min(self, limit: DateLimit) -> "DateSchema":
        return self._compare("min", limit, lambda value, limit: value >= limit)

    def max(self, limit: DateLimit) -> "DateSchema":
        return self._compare("max", limit, lambda value, limit: value <= limit)

    def _compare(self, name: str, limit: Any, compare: Callable[[Any, Any], bool]) -> "DateSchema":
        if limit != "now" and not isinstance(limit, Reference):
            converted = to_datetime(limit)
            if converted is None:
                raise SchemaError(f"Invalid date.{name} limit: {limit!r}")
            limit = converted

        def test(schema, value, state, options):
            if limit == "now":
                expected = datetime.datetime.now(datetime.timezone.utc)
            elif isinstance(limit, Reference):
                expected = to_datetime(limit.resolve(state))
                if expected is None:
                    return schema.create_error("date.ref", {"ref": limit.key}, state, options, value)
            else:
                expected = limit
            if compare(to_datetime(value), expected):
                return None
            return schema.create_error(f"date.{name}", {"limit": expected}, state, options, value)

        return self._test(name, limit, test)
