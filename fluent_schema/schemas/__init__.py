"""
Schema package initialization.
"""

from .base import AnySchema, Outcome, Rule, State, ValueSet
from .strings import StringSchema
from .numbers import NumberSchema
from .booleans import BooleanSchema
from .dates import DateSchema
from .objects import ObjectSchema
from .arrays import ArraySchema
from .alternatives import AlternativesSchema
from .references import ReferenceSchema

__all__ = [
    "AnySchema",
    "Outcome",
    "Rule",
    "State",
    "ValueSet",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "DateSchema",
    "ObjectSchema",
    "ArraySchema",
    "AlternativesSchema",
    "ReferenceSchema",
]
