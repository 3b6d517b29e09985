"""
Validation entry points.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from .api import ValidationError, ValidationResult
from .errors import process_reports
from .options import ValidationOptions
from .schema_compiler import compile_schema
from .schemas import State
from .utils import MISSING, TypeUtils

logger = logging.getLogger("fluent_schema")

Options = Optional[Union[Mapping[str, Any], ValidationOptions]]


class Validator:
    """
    Validates values against schemas.

    One validator holds one set of options and can be reused for any
    number of values and schemas.
    """

    def __init__(self, options: Options = None, verbose: bool = False):
        """
        Initialize a new validator.

        Args:
            options: Validation options (see ValidationOptions)
            verbose: Whether to log each validation at DEBUG level

        Raises:
            SchemaError: If an option is unknown or invalid
        """
        self.options = ValidationOptions.from_dict(options)
        self.verbose = verbose
        if verbose:
            logger.setLevel(logging.DEBUG)

    def validate(self, value: Any, schema: Any) -> ValidationResult:
        """
        Validate a value against a schema.

        Args:
            value: Value to validate
            schema: Schema node or structural literal

        Returns:
            ValidationResult with the validated value and the error, if any
        """
        compiled = compile_schema(schema)
        outcome = compiled._validate(value, State(), self.options)
        error = process_reports(outcome.errors, value)

        type_name = TypeUtils.get_type_name(value)
        if error is None:
            logger.debug(f"{type_name} value accepted by {compiled.kind} schema")
        else:
            count = len(error.details) if isinstance(error, ValidationError) else 1
            logger.debug(f"{type_name} value rejected by {compiled.kind} schema with {count} error(s)")

        result_value = None if outcome.value is MISSING else outcome.value
        return ValidationResult(value=result_value, error=error)


def validate(value: Any, schema: Any, options: Any = None,
             callback: Optional[Callable[[Optional[BaseException], Any], Any]] = None) -> Any:
    """
    Validate a value against a schema.

    Failures are returned, never raised.

    Args:
        value: Value to validate
        schema: Schema node or structural literal
        options: Validation options; a callable here is taken as the callback
        callback: Called as ``callback(error, value)``; its result is returned

    Returns:
        ValidationResult, or the callback's result when a callback is given
    """
    if callback is None and callable(options):
        callback, options = options, None
    result = Validator(options).validate(value, schema)
    if callback is not None:
        return callback(result.error, result.value)
    return result


def attempt(value: Any, schema: Any, message: Optional[Union[str, BaseException]] = None,
            options: Options = None) -> Any:
    """
    Validate a value and raise on failure.

    The raised ValidationError's message is the annotated input, prefixed
    with ``message`` when one is given. An exception passed as ``message``
    is raised as-is instead.

    Args:
        value: Value to validate
        schema: Schema node or structural literal
        message: Prefix for the error message, or an exception to raise
        options: Validation options

    Returns:
        The validated value

    Raises:
        ValidationError: If validation fails
    """
    result = Validator(options).validate(value, schema)
    error = result.error
    if error is None:
        return result.value

    if isinstance(message, BaseException):
        raise message
    if not isinstance(error, ValidationError):
        raise error

    annotated = error.annotate()
    error.message = f"{message} {annotated}" if message else annotated
    error.args = (error.message,)
    raise error


def assert_valid(value: Any, schema: Any, message: Optional[Union[str, BaseException]] = None,
                 options: Options = None) -> None:
    """Like attempt(), without returning the value."""
    attempt(value, schema, message, options)
