"""
Error annotation: renders an input value with inline error markers.
"""

import inspect
import json
from typing import Any, Dict, List, Sequence

from .utils import MISSING, format_literal, function_source

RED = "\u001b[31m"
RED_BG = "\u001b[41m"
END_COLOR = "\u001b[0m"

# Values that error paths can descend into
_NAVIGABLE = (dict, list, tuple)


class _Marks:
    """Error positions attached to one container."""

    __slots__ = ("errors", "missing", "own")

    def __init__(self):
        self.errors: Dict[Any, List[int]] = {}
        self.missing: Dict[Any, List[int]] = {}
        self.own: List[int] = []


class ErrorAnnotator:
    """
    Renders the original input with numbered markers at each error location.

    Details sharing a location are merged into a single marker listing all of
    their positions. Keys that are themselves error locations are moved after
    their untouched siblings, and required keys absent from the input are
    appended as ``-- missing --`` entries. Circular structures are rendered
    as ``"[Circular ~<path>]"``.
    """

    def __init__(self, colorless: bool = False, indent: int = 2):
        """
        Initialize a new annotator.

        Args:
            colorless: Omit ANSI color codes when True
            indent: Number of spaces per nesting level
        """
        self.colorless = colorless
        self.indent = indent
        self.red = "" if colorless else RED
        self.red_bg = "" if colorless else RED_BG
        self.end_color = "" if colorless else END_COLOR

    def annotate(self, original: Any, details: Sequence[Any]) -> str:
        """
        Annotate a value with the given error details.

        Args:
            original: The value as it was before validation
            details: ErrorDetail objects in discovery order

        Returns:
            The rendered value followed by a numbered legend
        """
        if isinstance(original, _NAVIGABLE):
            marks = self._collect(original, details)
            body = self._render(original, 0, [], [], marks)
        else:
            body = self._render_scalar(original)
            if details:
                body = f"{body} {self._marker(range(1, len(details) + 1))}"

        legend = "".join(f"\n[{position}] {detail.message}" for position, detail in enumerate(details, 1))
        return f"{body}\n{self.red}{legend}{self.end_color}"

    def _collect(self, root: Any, details: Sequence[Any]) -> Dict[int, _Marks]:
        """Attach every detail position to the container holding its location."""
        marks: Dict[int, _Marks] = {}

        def marks_for(container: Any) -> _Marks:
            entry = marks.get(id(container))
            if entry is None:
                entry = marks[id(container)] = _Marks()
            return entry

        # Deepest and latest first, so earlier discoveries end up last
        for position in range(len(details), 0, -1):
            parts = tuple(details[position - 1].path_parts)
            if not parts:
                marks_for(root).own.append(position)
                continue

            ref = root
            for index, segment in enumerate(parts):
                child = _child(ref, segment)
                if index + 1 < len(parts) and isinstance(child, _NAVIGABLE):
                    ref = child
                    continue

                entry = marks_for(ref)
                bucket = entry.missing if child is MISSING else entry.errors
                bucket.setdefault(segment, []).append(position)
                break

        return marks

    def _render(self, value: Any, depth: int, stack: List[Any], keys: List[Any],
                marks: Dict[int, _Marks]) -> str:
        if not isinstance(value, (dict, list, tuple, set, frozenset)):
            return self._render_scalar(value)

        for index, ancestor in enumerate(stack):
            if ancestor is value:
                path = "".join(f".{key}" for key in keys[:index])
                return json.dumps(f"[Circular ~{path}]", ensure_ascii=False)

        entry = marks.get(id(value)) if isinstance(value, _NAVIGABLE) else None
        stack.append(value)
        try:
            if isinstance(value, dict):
                text = self._render_object(value, depth, stack, keys, marks, entry)
            else:
                text = self._render_array(value, depth, stack, keys, marks, entry)
        finally:
            stack.pop()

        if entry and entry.own:
            first, separator, rest = text.partition("\n")
            text = f"{first} {self._marker(entry.own)}{separator}{rest}"
        return text

    def _render_object(self, value: Dict[Any, Any], depth: int, stack: List[Any], keys: List[Any],
                       marks: Dict[int, _Marks], entry: Any) -> str:
        padding = " " * (self.indent * (depth + 1))
        relocated = entry.errors if entry else {}
        missing = entry.missing if entry else {}
        lines = []

        for key, item in value.items():
            if key in relocated:
                continue
            rendered = self._render_child(item, key, depth, stack, keys, marks)
            lines.append(f"{padding}{self._render_key(key)}: {rendered}")

        for key, positions in relocated.items():
            rendered = self._render_child(value[key], key, depth, stack, keys, marks)
            lines.append(f"{padding}{self._render_key(key)} {self._marker(positions)}: {rendered}")

        for key, positions in missing.items():
            lines.append(
                f"{padding}{self.red_bg}{self._render_key(key)}{self.end_color}"
                f"{self.red} [{_positions(positions)}]: -- missing --{self.end_color}"
            )

        if not lines:
            return "{}"
        return "{\n" + ",\n".join(lines) + "\n" + " " * (self.indent * depth) + "}"

    def _render_array(self, value: Any, depth: int, stack: List[Any], keys: List[Any],
                      marks: Dict[int, _Marks], entry: Any) -> str:
        padding = " " * (self.indent * (depth + 1))
        relocated = entry.errors if entry else {}
        items = list(value)
        lines = []

        for index, item in enumerate(items):
            text = self._render_child(item, index, depth, stack, keys, marks)
            if index < len(items) - 1:
                text += ","
            positions = relocated.get(index)
            if positions:
                first, separator, rest = text.partition("\n")
                text = f"{first} {self._marker(positions)}{separator}{rest}"
            lines.append(f"{padding}{text}")

        if not lines:
            return "[]"
        return "[\n" + "\n".join(lines) + "\n" + " " * (self.indent * depth) + "]"

    def _render_child(self, item: Any, key: Any, depth: int, stack: List[Any], keys: List[Any],
                      marks: Dict[int, _Marks]) -> str:
        keys.append(key)
        try:
            return self._render(item, depth + 1, stack, keys, marks)
        finally:
            keys.pop()

    def _render_scalar(self, value: Any) -> str:
        if inspect.isroutine(value) or inspect.isclass(value):
            # Source is shown verbatim but kept on one line
            return json.dumps(function_source(value), ensure_ascii=False)[1:-1]
        return format_literal(value)

    def _render_key(self, key: Any) -> str:
        return json.dumps(str(key), ensure_ascii=False)

    def _marker(self, positions: Any) -> str:
        return f"{self.red}[{_positions(positions)}]{self.end_color}"


def _child(container: Any, segment: Any) -> Any:
    """Look up one path segment, returning MISSING when it is absent."""
    if isinstance(container, dict):
        try:
            return container[segment] if segment in container else MISSING
        except TypeError:
            return MISSING
    if isinstance(container, (list, tuple)) and isinstance(segment, int) and not isinstance(segment, bool):
        if 0 <= segment < len(container):
            return container[segment]
    return MISSING


def _positions(positions: Any) -> str:
    return ", ".join(str(position) for position in sorted(positions))
