#!/usr/bin/env python3
"""
Command-line interface for the fluent schema validator.
"""

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Union

from .api import ValidationError
from .validator import Validator
from .version import __version__

logger = logging.getLogger("fluent_schema")


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Validate a JSON document against a fluent schema."
    )
    parser.add_argument(
        "data_file",
        type=str,
        help="Path to the JSON data file to validate"
    )
    parser.add_argument(
        "schema",
        type=str,
        help="Schema to validate against, as module:attribute"
    )
    parser.add_argument(
        "--no-abort-early",
        action="store_true",
        help="Report every failure instead of stopping at the first one"
    )
    parser.add_argument(
        "--strip-unknown",
        action="store_true",
        help="Drop undeclared object keys instead of failing"
    )
    parser.add_argument(
        "--allow-unknown",
        action="store_true",
        help="Accept undeclared object keys"
    )
    parser.add_argument(
        "--no-convert",
        action="store_true",
        help="Disable conversion of strings to numbers, booleans, dates and objects"
    )
    parser.add_argument(
        "--language",
        type=str,
        metavar="FILE",
        help="JSON file with message templates overriding the defaults"
    )
    parser.add_argument(
        "--colorless",
        action="store_true",
        help="Print the annotated input without ANSI colors"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the error as JSON instead of the annotated input"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(args)


def load_json(filepath: Union[str, Path]) -> Any:
    """
    Load and parse a JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file contains invalid JSON
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise json.JSONDecodeError(
            f"Failed to parse JSON in {filepath}: {e.msg}",
            e.doc,
            e.pos
        ) from e


def load_schema(target: str) -> Any:
    """
    Import a schema given as ``module:attribute``.

    Args:
        target: Import path of the module and dotted attribute name

    Returns:
        The schema object (a schema node or structural literal)

    Raises:
        ValueError: If the target is not in module:attribute form
        ImportError: If the module cannot be imported
        AttributeError: If the attribute does not exist
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Schema must be given as module:attribute, got {target!r}")

    if str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))

    schema = importlib.import_module(module_name)
    for name in attribute.split("."):
        schema = getattr(schema, name)
    return schema


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the script."""
    args = parse_args(args)

    if args.verbose:
        logger.setLevel(logging.DEBUG)

    try:
        data = load_json(args.data_file)
        schema = load_schema(args.schema)
        options = {
            "abort_early": not args.no_abort_early,
            "strip_unknown": args.strip_unknown,
            "allow_unknown": args.allow_unknown,
            "convert": not args.no_convert,
        }
        if args.language:
            options["language"] = load_json(args.language)
        result = Validator(options, verbose=args.verbose).validate(data, schema)
    except (OSError, ValueError, ImportError, AttributeError) as e:
        logger.error(f"{e}")
        return 2

    error = result.error
    if error is None:
        logger.info("Validation successful!")
        return 0

    if not isinstance(error, ValidationError):
        logger.error(f"Validation failed: {error}")
        return 1

    if args.json:
        report = {
            "message": error.message,
            "details": [detail.to_dict() for detail in error.details],
        }
        print(json.dumps(report, indent=2, default=str))
    else:
        print(error.annotate(colorless=args.colorless))

    logger.error("Validation failed:")
    for detail in error.details:
        logger.error(f"  - {detail.path or '<root>'}: {detail.message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
