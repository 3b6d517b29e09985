"""
Validation options.
"""

import copy
from dataclasses import dataclass, field, fields, replace
from functools import cached_property
from typing import Any, Dict, Mapping, Optional

from .api import SchemaError
from .language import MessageCatalog, deep_merge

PRESENCE_VALUES = ("optional", "required", "forbidden")

# camelCase spellings accepted in option dictionaries
OPTION_ALIASES = {
    "abortEarly": "abort_early",
    "allowUnknown": "allow_unknown",
    "stripUnknown": "strip_unknown",
}


@dataclass
class ValidationOptions:
    """
    Settings for one validation call.

    Attributes:
        abort_early: Stop at the first failure instead of collecting all of them
        convert: Let kinds coerce values (numeric strings, JSON strings, ...)
        allow_unknown: Accept object keys that the schema does not declare
        strip_unknown: Drop undeclared object keys instead of failing
        presence: Default presence for nodes without an explicit one
        language: Overlay merged over the default message templates
    """
    abort_early: bool = True
    convert: bool = True
    allow_unknown: bool = False
    strip_unknown: bool = False
    presence: str = "optional"
    language: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, options: Optional[Mapping[str, Any]] = None) -> "ValidationOptions":
        """
        Build options from a dictionary.

        Args:
            options: Option values, snake_case or camelCase keys

        Returns:
            A new ValidationOptions instance

        Raises:
            SchemaError: If an option is unknown or has an invalid value
        """
        if isinstance(options, ValidationOptions):
            return options
        return cls().merge(options or {})

    def merge(self, settings: Mapping[str, Any]) -> "ValidationOptions":
        """
        Return a copy of these options with settings applied on top.

        The language overlay is deep-merged; every other option replaces.
        """
        normalized = normalize_options(settings)
        if "language" in normalized:
            normalized["language"] = deep_merge(copy.deepcopy(self.language), normalized["language"])
        return replace(self, **normalized) if normalized else self

    @cached_property
    def catalog(self) -> MessageCatalog:
        return MessageCatalog(self.language)


def normalize_options(settings: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate option names and values.

    Args:
        settings: Option values keyed by name

    Returns:
        Options keyed by their snake_case names

    Raises:
        SchemaError: If an option is unknown or has an invalid value
    """
    if not isinstance(settings, Mapping):
        raise SchemaError(f"Options must be a mapping, got {type(settings).__name__}")

    known = {f.name for f in fields(ValidationOptions)}
    normalized = {}
    for name, value in settings.items():
        option = OPTION_ALIASES.get(name, name)
        if option not in known:
            raise SchemaError(f"Unknown option: {name}")
        if option == "presence" and value not in PRESENCE_VALUES:
            raise SchemaError(f"Invalid presence: {value!r}")
        if option == "language":
            if not isinstance(value, Mapping):
                raise SchemaError("Language overlay must be a mapping")
        elif option != "presence" and not isinstance(value, bool):
            raise SchemaError(f"Option {name} must be a boolean")
        normalized[option] = value
    return normalized
