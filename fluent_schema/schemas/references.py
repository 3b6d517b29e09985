"""
Reference schema implementation.
"""

from .base import AnySchema
from ..reference import Reference


class ReferenceSchema(AnySchema):
    """
    Schema matching whatever value a reference resolves to.

    A referent that is missing matches nothing.
    """

    _type = "reference"

    def __init__(self, reference: Reference):
        super().__init__()
        self._inner = {"reference": reference}
        self._valids.add(reference)
        self._flags["allowOnly"] = True

    @property
    def reference(self) -> Reference:
        return self._inner["reference"]
