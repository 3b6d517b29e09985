"""
Utility classes and functions for the fluent schema validator.
"""

import datetime
import inspect
import json
import math
from typing import Any, List, Sequence


class _Missing:
    """Marker for a value that is absent, as opposed to ``None``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()


class KeyPath:
    """
    Utility class for handling dotted key paths.

    Paths are kept as tuples of keys and indices internally and rendered
    dot-joined for display (``"a.0.b"``; the root is ``""``).
    """

    @staticmethod
    def from_parts(parts: Sequence[Any]) -> str:
        """
        Create a display path from path parts.

        Args:
            parts: Sequence of keys and indices

        Returns:
            Dot-joined path string
        """
        return ".".join(str(part) for part in parts)

    @staticmethod
    def to_parts(path: str) -> List[str]:
        """
        Split a dotted path into its component parts.

        Args:
            path: Dotted path string

        Returns:
            List of path segments
        """
        if not path:
            return []
        return path.split(".")

    @staticmethod
    def reach(document: Any, path: str) -> Any:
        """
        Resolve a dotted path within a document.

        Args:
            document: The value to navigate
            path: Dotted path string

        Returns:
            The referenced value, or MISSING when any segment cannot be resolved
        """
        current = document
        for part in KeyPath.to_parts(path):
            if isinstance(current, dict):
                if part in current:
                    current = current[part]
                    continue
                return MISSING
            if isinstance(current, (list, tuple)):
                try:
                    index = int(part)
                except ValueError:
                    return MISSING
                if -len(current) <= index < len(current):
                    current = current[index]
                    continue
                return MISSING
            return MISSING
        return current


# Characters left untouched by escape_html
_SAFE_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 ,.-_"
)

_NAMED_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "\xa0": "&nbsp;",
    "¢": "&cent;",
    "£": "&pound;",
    "¤": "&curren;",
    "©": "&copy;",
    "®": "&reg;",
}


def escape_html(text: str) -> str:
    """
    Escape every character outside a small safe set as an HTML entity.

    Args:
        text: Text to escape

    Returns:
        Escaped text, e.g. ``"a()"`` becomes ``"a&#x28;&#x29;"``
    """
    escaped = []
    for char in text:
        if char in _SAFE_CHARS:
            escaped.append(char)
        elif char in _NAMED_ENTITIES:
            escaped.append(_NAMED_ENTITIES[char])
        elif ord(char) >= 256:
            escaped.append(f"&#{ord(char)};")
        else:
            escaped.append(f"&#x{ord(char):02x};")
    return "".join(escaped)


def format_number(value: Any) -> str:
    """Render a number the way a JSON document would show it."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def function_source(func: Any) -> str:
    """
    Get the verbatim source of a callable, falling back to its repr.

    Builtins, C extensions and interactively defined callables carry no
    retrievable source.
    """
    try:
        return inspect.getsource(func).strip()
    except (OSError, TypeError):
        return repr(func)


def format_literal(value: Any, _seen: frozenset = frozenset()) -> str:
    """
    Render any value as a single literal.

    Strings are JSON-quoted; values with no JSON representation (NaN,
    infinities, callables, arbitrary objects) get a readable literal.

    Args:
        value: Value to render

    Returns:
        Literal text
    """
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        if id(value) in _seen:
            return "[Circular]"
        _seen = _seen | {id(value)}
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return json.dumps(value.isoformat())
    if isinstance(value, (list, tuple, set, frozenset)):
        return "[" + ", ".join(format_literal(item, _seen) for item in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(
            f"{format_literal(str(key))}: {format_literal(item, _seen)}" for key, item in value.items()
        ) + "}"
    if inspect.isroutine(value) or inspect.isclass(value):
        return function_source(value)
    return repr(value)


class TypeUtils:
    """Utilities for naming the kind of a Python value."""

    @staticmethod
    def get_type_name(value: Any) -> str:
        """
        Get the schema kind name for a Python value.

        Args:
            value: Python value

        Returns:
            Kind name
        """
        if value is MISSING:
            return "undefined"
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        if isinstance(value, (datetime.datetime, datetime.date)):
            return "date"
        if isinstance(value, (list, tuple)):
            return "array"
        if isinstance(value, dict):
            return "object"
        if callable(value):
            return "function"
        return type(value).__name__

    @staticmethod
    def is_number(value: Any) -> bool:
        """Check for an int or float that is not a bool and not NaN."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return not (isinstance(value, float) and math.isnan(value))

    @staticmethod
    def same_value(left: Any, right: Any) -> bool:
        """
        Compare two values without letting booleans equal numbers.

        Args:
            left: First value
            right: Second value

        Returns:
            True if both values are equal and of compatible kinds
        """
        if isinstance(left, bool) or isinstance(right, bool):
            return isinstance(left, bool) and isinstance(right, bool) and left is right
        if isinstance(left, (dict, list, tuple)) or isinstance(right, (dict, list, tuple)):
            if type(left) is not type(right):
                return False
            if isinstance(left, dict):
                return left.keys() == right.keys() and all(
                    TypeUtils.same_value(left[key], right[key]) for key in left
                )
            return len(left) == len(right) and all(
                TypeUtils.same_value(a, b) for a, b in zip(left, right)
            )
        try:
            return bool(left == right)
        except (TypeError, ValueError):
            return False

