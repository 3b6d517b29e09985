"""
References to sibling values, resolved at validation time.
"""

from typing import Any

from .api import SchemaError
from .utils import MISSING, KeyPath


class Reference:
    """
    A dotted path to another value of the object being validated.

    References resolve against the object holding the value under
    validation (or, inside ``assert_``, the object the assertion belongs
    to). A referent that does not exist resolves to MISSING and never
    matches anything.
    """

    def __init__(self, key: str):
        """
        Initialize a new reference.

        Args:
            key: Dotted path of the referenced value, e.g. ``"a.b"``

        Raises:
            SchemaError: If the key is not a non-empty string
        """
        if not isinstance(key, str) or not key:
            raise SchemaError(f"Invalid reference key: {key!r}")
        self.key = key
        self.root = KeyPath.to_parts(key)[0]

    def resolve(self, state: Any) -> Any:
        """
        Resolve the reference for a validation state.

        Args:
            state: State of the value being validated

        Returns:
            The referenced value, or MISSING
        """
        target = state.reference if state.reference is not None else state.parent
        if target is None:
            return MISSING
        return KeyPath.reach(target, self.key)

    def __repr__(self) -> str:
        return f"ref:{self.key}"
