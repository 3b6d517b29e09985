"""
Boolean schema implementation.
"""

from typing import Any

from .base import AnySchema, Outcome, State
from ..options import ValidationOptions

TRUTHY_STRINGS = frozenset(("true", "yes", "on"))
FALSY_STRINGS = frozenset(("false", "no", "off"))


class BooleanSchema(AnySchema):
    """
    Schema for boolean values.

    With conversion enabled the strings ``true``/``yes``/``on`` and
    ``false``/``no``/``off`` (any case) are accepted as well.
    """

    _type = "boolean"

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        if isinstance(value, bool):
            return Outcome(value)
        if isinstance(value, str) and options.convert:
            normalized = value.lower()
            if normalized in TRUTHY_STRINGS:
                return Outcome(True)
            if normalized in FALSY_STRINGS:
                return Outcome(False)
        return Outcome(value, [self.create_error("boolean.base", None, state, options, value)])
