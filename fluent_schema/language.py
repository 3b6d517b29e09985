"""
Message catalog: default templates, language overlays and interpolation.

Templates are keyed by ``"<kind>.<rule>"`` and may contain ``{{name}}``
placeholders (substituted as-is) and ``{{!name}}`` placeholders (substituted
HTML-escaped). A template that does not mention ``key`` is prefixed with the
``key`` template; a leading ``!!`` suppresses that prefix.
"""

import datetime
import re
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .utils import MISSING, KeyPath, escape_html, format_literal


def _freeze(table: Dict[str, Any]) -> Mapping[str, Any]:
    """Wrap a nested template table in read-only views, level by level."""
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, dict) else value for key, value in table.items()
    })


DEFAULT_MESSAGES: Mapping[str, Any] = _freeze({
    "root": "value",
    "key": '"{{!key}}" ',
    "messages": {
        "wrapArrays": True,
    },
    "any": {
        "unknown": "is not allowed",
        "invalid": "contains an invalid value",
        "empty": "is not allowed to be empty",
        "required": "is required",
        "allowOnly": "must be one of {{valids}}",
        "default": "threw an error when running default method",
    },
    "alternatives": {
        "base": "not matching any of the allowed alternatives",
    },
    "array": {
        "base": "must be an array",
        "includes": "at position {{pos}} does not match any of the allowed types",
        "includesOne": "at position {{pos}} fails because {{reason}}",
        "excludes": "at position {{pos}} contains an excluded value",
        "min": "must contain at least {{limit}} items",
        "max": "must contain less than or equal to {{limit}} items",
        "length": "must contain {{limit}} items",
        "unique": "position {{pos}} contains a duplicate value",
    },
    "boolean": {
        "base": "must be a boolean",
    },
    "date": {
        "base": "must be a number of milliseconds or valid date string",
        "min": 'must be larger than or equal to "{{limit}}"',
        "max": 'must be less than or equal to "{{limit}}"',
        "ref": 'references "{{ref}}" which is not a date',
    },
    "object": {
        "base": "must be an object",
        "child": 'child "{{!key}}" fails because {{reason}}',
        "min": "must have at least {{limit}} children",
        "max": "must have less than or equal to {{limit}} children",
        "length": "must have {{limit}} children",
        "allowUnknown": "is not allowed",
        "with": "requires the presence of {{peer}}",
        "and": "contains {{present}} without its required peers {{missing}}",
        "nand": '!!"{{main}}" must not exist simultaneously with {{peers}}',
        "without": "conflict with forbidden peer {{peer}}",
        "missing": "must contain at least one of {{peers}}",
        "xor": "contains a conflict between exclusive peers {{peers}}",
        "assert": '!!"{{ref}}" validation failed because "{{ref}}" failed to {{message}}',
        "rename": {
            "multiple": 'cannot rename child "{{from}}" because multiple renames are disabled '
                        'and another key was already renamed to "{{to}}"',
            "override": 'cannot rename child "{{from}}" because override is disabled and target "{{to}}" exists',
        },
    },
    "number": {
        "base": "must be a number",
        "min": "must be larger than or equal to {{limit}}",
        "max": "must be less than or equal to {{limit}}",
        "less": "must be less than {{limit}}",
        "greater": "must be greater than {{limit}}",
        "integer": "must be an integer",
        "negative": "must be a negative number",
        "positive": "must be a positive number",
        "precision": "must have no more than {{limit}} decimal places",
        "ref": 'references "{{ref}}" which is not a number',
        "multiple": "must be a multiple of {{multiple}}",
    },
    "string": {
        "base": "must be a string",
        "min": "length must be at least {{limit}} characters long",
        "max": "length must be less than or equal to {{limit}} characters long",
        "length": "length must be {{limit}} characters long",
        "alphanum": "must only contain alpha-numeric characters",
        "token": "must only contain alpha-numeric and underscore characters",
        "regex": {
            "base": 'with value "{{!value}}" fails to match the required pattern: {{pattern}}',
            "name": 'with value "{{!value}}" fails to match the {{name}} pattern',
        },
        "email": "must be a valid email",
        "hex": "must only contain hexadecimal characters",
        "lowercase": "must only contain lowercase characters",
        "uppercase": "must only contain uppercase characters",
        "trim": "must not have leading or trailing whitespace",
        "ref": 'references "{{ref}}" which is not a number',
    },
})

_PLACEHOLDER = re.compile(r"\{\{(!?)([^}]+)\}\}")
_KEY_PLACEHOLDER = re.compile(r"\{\{!?key\}\}")


def deep_merge(target: Dict[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge an overlay into a target dictionary in place.

    Nested mappings are merged key by key; any other overlay value replaces
    the target value.

    Args:
        target: Dictionary to update
        overlay: Values to merge in

    Returns:
        The updated target
    """
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            deep_merge(target[key], value)
        elif isinstance(value, Mapping):
            target[key] = deep_merge({}, value)
        else:
            target[key] = value
    return target


def stringify(value: Any, wrap_arrays: bool = True) -> str:
    """
    Convert a context value into message text.

    Args:
        value: Context value
        wrap_arrays: Surround list values with brackets

    Returns:
        Text to substitute into a template
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, datetime.date):
        return value.isoformat()
    if hasattr(value, "render") and callable(value.render):
        return value.render()
    if isinstance(value, (list, tuple)):
        partial = ", ".join(stringify(item, wrap_arrays) for item in value)
        return f"[{partial}]" if wrap_arrays else partial
    return format_literal(value)


class MessageCatalog:
    """
    Default templates overlaid with a language dictionary.

    The overlay may replace any template (``{"number": {"min": "..."}}``)
    and three special entries: ``root`` (label used for the top-level value),
    ``key`` (label prefix template) and ``messages.wrapArrays``.
    """

    def __init__(self, language: Optional[Mapping[str, Any]] = None):
        """
        Initialize a new message catalog.

        Args:
            language: Optional overlay merged over the defaults
        """
        self._messages = deep_merge(deep_merge({}, DEFAULT_MESSAGES), language or {})

    @property
    def root(self) -> str:
        return str(self._messages.get("root") or DEFAULT_MESSAGES["root"])

    @property
    def key(self) -> str:
        key = self._messages.get("key")
        return DEFAULT_MESSAGES["key"] if key is None else str(key)

    @property
    def wrap_arrays(self) -> bool:
        wrap = KeyPath.reach(self._messages, "messages.wrapArrays")
        return wrap if isinstance(wrap, bool) else True

    def template(self, type_: str) -> Optional[str]:
        """
        Look up the template for a message key.

        Args:
            type_: Dotted message key such as ``object.rename.override``

        Returns:
            Template text, or None when the catalog has no such entry
        """
        template = KeyPath.reach(self._messages, type_)
        if template is MISSING or not isinstance(template, str):
            return None
        return template

    def format(self, template: str, context: Mapping[str, Any]) -> str:
        """
        Interpolate a template.

        Args:
            template: Template text
            context: Values available to placeholders

        Returns:
            The rendered message
        """
        skip_key = template.startswith("!!")
        if skip_key:
            template = template[2:]
        elif not _KEY_PLACEHOLDER.search(template):
            template = self.key + template

        wrap_arrays = self.wrap_arrays
        values = dict(context)

        def substitute(match: "re.Match[str]") -> str:
            secure, name = match.group(1), match.group(2)
            value = KeyPath.reach(values, name)
            text = "" if value is MISSING else stringify(value, wrap_arrays)
            return escape_html(text) if secure else text

        return _PLACEHOLDER.sub(substitute, template)
