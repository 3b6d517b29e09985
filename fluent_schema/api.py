"""
Public data model for the fluent schema validator.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from .annotate import ErrorAnnotator
from .utils import MISSING, KeyPath


class SchemaError(ValueError):
    """Raised when a schema is built with an invalid definition."""


class Failure(NamedTuple):
    """
    Failure signal returned by a custom rule.

    Attributes:
        type: Message key identifying the failure (e.g. ``string.startsWith``)
        context: Values available to the message template
    """
    type: str
    context: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ErrorDetail:
    """
    One reported failure.

    Attributes:
        message: Fully interpolated message for this failure
        path: Dot-joined location of the failing value ("" for the root)
        type: Message key that produced the message (e.g. ``number.min``)
        context: Values used for interpolation
        path_parts: The literal keys and indices of the location
    """
    message: str
    path: str
    type: str
    context: Dict[str, Any] = field(default_factory=dict)
    path_parts: Tuple[Any, ...] = ()

    @classmethod
    def create(cls, message: str, path_parts: Tuple[Any, ...], type: str,
               context: Dict[str, Any]) -> "ErrorDetail":
        return cls(
            message=message,
            path=KeyPath.from_parts(path_parts),
            type=type,
            context=context,
            path_parts=tuple(path_parts),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "message": self.message,
            "path": self.path,
            "type": self.type,
            "context": {key: value for key, value in self.context.items() if key != "reason"},
        }

    def __str__(self) -> str:
        return self.message


class ValidationError(Exception):
    """
    Aggregated failures of one validation call.

    Attributes:
        name: Always ``"ValidationError"``
        is_validation_error: Marker distinguishing engine errors from
            caller-supplied exceptions
        message: Top-level messages joined with ``". "``
        details: Leaf failures in discovery order
    """

    name = "ValidationError"
    is_validation_error = True

    def __init__(self, message: str, details: List[ErrorDetail], original: Any = MISSING):
        super().__init__(message)
        self.message = message
        self.details = details
        self._object = _clone(original)

    def annotate(self, colorless: bool = False) -> str:
        """
        Render the original input with inline error markers and a legend.

        Args:
            colorless: Omit ANSI color codes when True

        Returns:
            Annotated text
        """
        return ErrorAnnotator(colorless=colorless).annotate(self._object, self.details)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ValidationError({self.message!r}, details={len(self.details)})"


@dataclass
class ValidationResult:
    """
    Result of a validation call.

    Attributes:
        value: The validated (and possibly converted) value
        error: ValidationError (or caller-supplied exception) on failure, else None
    """
    value: Any = None
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[Any]:
        return iter((self.value, self.error))


def _clone(value: Any) -> Any:
    """Deep copy a value for later annotation, keeping cycles intact."""
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error):
        # Locks, generators and similar objects cannot be copied; annotate the live value.
        return value
