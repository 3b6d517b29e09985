#!/usr/bin/env python3
"""
Fluent Schema Validator

This package validates values against immutable schemas built with fluent
builders, and reports failures as localizable messages, structured details
and an annotated rendering of the input.
"""

import logging

from .api import ErrorDetail, Failure, SchemaError, ValidationError, ValidationResult
from .builders import (
    allow,
    alt,
    alternatives,
    any_,
    array,
    bool_,
    boolean,
    date,
    equal,
    forbidden,
    invalid,
    number,
    object_,
    only,
    optional,
    ref,
    required,
    string,
    valid,
)
from .options import ValidationOptions
from .reference import Reference
from .schema_compiler import SchemaCompiler, compile_schema
from .utils import MISSING
from .validator import Validator, assert_valid, attempt, validate
from .version import __version__

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("fluent_schema")

# Export public classes and functions
__all__ = [
    "ErrorDetail",
    "Failure",
    "MISSING",
    "Reference",
    "SchemaCompiler",
    "SchemaError",
    "ValidationError",
    "ValidationOptions",
    "ValidationResult",
    "Validator",
    "allow",
    "alt",
    "alternatives",
    "any_",
    "array",
    "assert_valid",
    "attempt",
    "bool_",
    "boolean",
    "compile_schema",
    "date",
    "equal",
    "forbidden",
    "invalid",
    "number",
    "object_",
    "only",
    "optional",
    "ref",
    "required",
    "string",
    "valid",
    "validate",
]
