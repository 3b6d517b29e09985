"""
Fluent Schema Validator

Validates a JSON document against a schema built with the fluent builders.

Usage:
    python -m fluent_schema <data_file> <module:attribute> [--no-abort-early] [--verbose]
"""

import sys

from fluent_schema.cli import main

if __name__ == "__main__":
    sys.exit(main())
