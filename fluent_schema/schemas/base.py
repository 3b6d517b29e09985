"""
Base schema node for the fluent schema validator.

Every schema kind derives from AnySchema. Nodes are immutable once built:
each modifier returns a modified clone and leaves the original untouched,
so one schema can be shared by any number of validations.
"""

import copy
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

from ..api import Failure, SchemaError
from ..errors import Report
from ..options import ValidationOptions, normalize_options
from ..language import deep_merge
from ..reference import Reference
from ..utils import MISSING, TypeUtils


class State:
    """
    Location of the value being validated.

    Attributes:
        key: Key or index of the value within its parent (None at the root)
        path: Keys and indices from the root to the value
        parent: Object holding the value, used to resolve references
        reference: Object references resolve against instead of the parent
    """

    __slots__ = ("key", "path", "parent", "reference")

    def __init__(self, key: Any = None, path: Tuple[Any, ...] = (), parent: Any = None, reference: Any = None):
        self.key = key
        self.path = tuple(path)
        self.parent = parent
        self.reference = reference

    def child(self, key: Any, parent: Any) -> "State":
        """Create the state of a value nested under this one."""
        return State(key, self.path + (key,), parent, self.reference)

    def __repr__(self) -> str:
        return f"State(key={self.key!r}, path={self.path!r})"


class Outcome(NamedTuple):
    """Validated value and the reports produced for it (None when valid)."""
    value: Any
    errors: Optional[List[Any]] = None


class Rule(NamedTuple):
    """
    One leaf rule attached to a node.

    Attributes:
        name: Rule name (e.g. ``min``)
        arg: Rule parameters, kept for introspection
        func: ``func(schema, value, state, options)`` returning a Report or None
    """
    name: str
    arg: Any
    func: Callable[..., Optional[Report]]


class ValueSet:
    """Ordered set of literal values and references."""

    def __init__(self, values: Optional[List[Any]] = None):
        self._values: List[Any] = list(values or [])

    def add(self, value: Any) -> None:
        if not self._contains(value):
            self._values.append(value)

    def remove(self, value: Any) -> None:
        self._values = [item for item in self._values if not _same_entry(item, value)]

    def has(self, value: Any, state: State) -> bool:
        """
        Check whether a value matches one of the entries.

        Args:
            value: Value to look up
            state: State used to resolve reference entries

        Returns:
            True on a match
        """
        if value is MISSING:
            return False
        for item in self._values:
            if isinstance(item, Reference):
                item = item.resolve(state)
                if item is MISSING:
                    continue
            if TypeUtils.same_value(item, value):
                return True
        return False

    def values(self) -> List[Any]:
        return list(self._values)

    def copy(self) -> "ValueSet":
        return ValueSet(self._values)

    def _contains(self, value: Any) -> bool:
        return any(_same_entry(item, value) for item in self._values)

    def __len__(self) -> int:
        return len(self._values)


def _same_entry(left: Any, right: Any) -> bool:
    if isinstance(left, Reference) or isinstance(right, Reference):
        return left is right
    return TypeUtils.same_value(left, right)


def _flatten(values: Tuple[Any, ...]) -> List[Any]:
    flat = []
    for value in values:
        if isinstance(value, list):
            flat.extend(value)
        else:
            flat.append(value)
    return flat


class AnySchema:
    """
    Schema node accepting any value, and base class of all kinds.

    A node is made of a kind tag, flags (presence, label, allow-only, ...),
    allowed and denied values, an ordered list of rules and kind-specific
    children.
    """

    _type = "any"

    def __init__(self):
        """Initialize a new schema node."""
        self._flags: Dict[str, Any] = {}
        self._valids = ValueSet()
        self._invalids = ValueSet()
        self._tests: Tuple[Rule, ...] = ()
        self._settings: Optional[Dict[str, Any]] = None
        self._inner: Dict[str, Any] = {}

    @property
    def kind(self) -> str:
        return self._type

    @property
    def flags(self) -> Mapping[str, Any]:
        return MappingProxyType(self._flags)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._tests

    def clone(self) -> "AnySchema":
        """
        Create a copy of this node that can be modified independently.

        Returns:
            The copy
        """
        obj = copy.copy(self)
        obj._flags = dict(self._flags)
        obj._valids = self._valids.copy()
        obj._invalids = self._invalids.copy()
        obj._settings = copy.deepcopy(self._settings)
        obj._inner = {key: list(value) if isinstance(value, list) else value
                      for key, value in self._inner.items()}
        return obj

    # Presence and values

    def allow(self, *values: Any) -> "AnySchema":
        """Accept the given values in addition to what the kind accepts."""
        obj = self.clone()
        for value in _flatten(values):
            if value is MISSING:
                raise SchemaError("Cannot allow a missing value")
            obj._invalids.remove(value)
            obj._valids.add(value)
        return obj

    def valid(self, *values: Any) -> "AnySchema":
        """Accept only the given values."""
        obj = self.allow(*values)
        obj._flags["allowOnly"] = True
        return obj

    only = valid
    equal = valid

    def invalid(self, *values: Any) -> "AnySchema":
        """Reject the given values."""
        obj = self.clone()
        for value in _flatten(values):
            if value is MISSING:
                raise SchemaError("Cannot disallow a missing value")
            obj._valids.remove(value)
            obj._invalids.add(value)
        return obj

    disallow = invalid
    not_ = invalid

    def required(self) -> "AnySchema":
        return self._set_flag("presence", "required")

    exist = required

    def optional(self) -> "AnySchema":
        return self._set_flag("presence", "optional")

    def forbidden(self) -> "AnySchema":
        return self._set_flag("presence", "forbidden")

    # Metadata and behaviour

    def label(self, name: str) -> "AnySchema":
        """Set the name used for this value in messages."""
        if not isinstance(name, str) or not name:
            raise SchemaError("Label name must be a non-empty string")
        return self._set_flag("label", name)

    def options(self, settings: Mapping[str, Any]) -> "AnySchema":
        """
        Attach options applied whenever this node is validated.

        Args:
            settings: Option values (see ValidationOptions)

        Raises:
            SchemaError: If an option is unknown or invalid
        """
        normalized = normalize_options(settings)
        obj = self.clone()
        obj._settings = deep_merge(obj._settings or {}, normalized)
        return obj

    def strict(self, is_strict: bool = True) -> "AnySchema":
        """Disable (or re-enable) conversion for this node."""
        return self.options({"convert": not is_strict})

    def default(self, value: Any = None) -> "AnySchema":
        """
        Substitute a value when the input is missing.

        Callables are called without arguments to produce the value.
        """
        return self._set_flag("default", value)

    def strip(self) -> "AnySchema":
        """Remove the value from the validated result."""
        return self._set_flag("strip", True)

    def error(self, err: BaseException) -> "AnySchema":
        """Report the given exception instead of this node's failures."""
        if not isinstance(err, BaseException):
            raise SchemaError("Error must be an exception instance")
        return self._set_flag("error", err)

    def rule(self, name: str, func: Callable[..., Any], params: Optional[Mapping[str, Any]] = None,
             message: Optional[str] = None) -> "AnySchema":
        """
        Attach a custom leaf rule.

        ``func(value, params, state)`` returns None (or True) on success,
        and False or a Failure otherwise. A False result reports
        ``<kind>.<name>``; ``message`` overrides the catalog template.

        Args:
            name: Rule name
            func: Rule predicate
            params: Rule parameters, also exposed to the message template
            message: Optional template for the failure message
        """
        if not isinstance(name, str) or not name:
            raise SchemaError("Rule name must be a non-empty string")
        if not callable(func):
            raise SchemaError(f"Rule {name} must be callable")
        params = dict(params or {})
        default_type = f"{self._type}.{name}"

        def test(schema, value, state, options):
            outcome = func(value, params, state)
            if outcome is None or outcome is True:
                return None
            if isinstance(outcome, Failure):
                context = dict(params)
                context.update(outcome.context or {})
                return schema.create_error(outcome.type, context, state, options, value, template=message)
            return schema.create_error(default_type, dict(params), state, options, value, template=message)

        return self._test(name, params, test)

    def validate(self, value: Any, options: Optional[Mapping[str, Any]] = None,
                 callback: Optional[Callable[[Any, Any], Any]] = None) -> Any:
        """Validate a value against this schema (see validator.validate)."""
        from ..validator import validate
        return validate(value, self, options, callback)

    # Engine

    def create_error(self, type_: str, context: Optional[Dict[str, Any]], state: State,
                     options: ValidationOptions, value: Any = MISSING,
                     template: Optional[str] = None, flags: Optional[Mapping[str, Any]] = None) -> Report:
        """
        Create a failure report for this node.

        Args:
            type_: Message key
            context: Rule-specific values
            state: Location of the failing value
            options: Options in effect
            value: The failing value (omitted from the context when MISSING)
            template: Template overriding the catalog entry
            flags: Flags to take the label from instead of this node's

        Returns:
            The report
        """
        context = dict(context or {})
        if value is not MISSING:
            context.setdefault("value", value)
        return Report(type_, context, state, options, self._flags if flags is None else flags, template)

    def _validate(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        """
        Match a value against this node.

        Presence first, then allowed and denied values, then the kind's
        base check (which may convert), then the rules in declared order.
        """
        original = value
        if self._settings:
            options = options.merge(self._settings)
        errors: List[Any] = []

        def finish() -> Outcome:
            return self._finish(value, errors, state, options)

        presence = self._flags.get("presence", options.presence)
        if presence == "optional":
            if value is MISSING:
                return finish()
        elif presence == "required":
            if value is MISSING:
                errors.append(self.create_error("any.required", None, state, options))
                return finish()
        elif presence == "forbidden":
            if value is MISSING:
                return finish()
            errors.append(self.create_error("any.unknown", None, state, options, value))
            return finish()

        if self._valids.has(value, state):
            return finish()
        if self._invalids.has(value, state):
            errors.append(self._invalid_error(value, state, options))
            if options.abort_early:
                return finish()

        base = self._base(value, state, options)
        if base is not None:
            value = base.value
            if base.errors:
                errors.extend(base.errors)
                return finish()
            if value is not original:
                if self._valids.has(value, state):
                    return finish()
                if self._invalids.has(value, state):
                    errors.append(self._invalid_error(value, state, options))
                    if options.abort_early:
                        return finish()

        if self._flags.get("allowOnly"):
            errors.append(self.create_error("any.allowOnly", {"valids": self._valids.values()},
                                            state, options, value))
            if options.abort_early:
                return finish()

        for rule in self._tests:
            report = rule.func(self, value, state, options)
            if report is not None:
                errors.append(report)
                if options.abort_early:
                    return finish()

        return finish()

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Optional[Outcome]:
        """Kind-specific type check and conversion; None when the kind has none."""
        return None

    def _finish(self, value: Any, errors: List[Any], state: State, options: ValidationOptions) -> Outcome:
        final = value
        if self._flags.get("strip"):
            final = MISSING
        elif value is MISSING and "default" in self._flags:
            default = self._flags["default"]
            if callable(default):
                try:
                    final = default()
                except Exception as exc:
                    errors.append(self.create_error("any.default", {"error": exc}, state, options))
            else:
                final = copy.deepcopy(default)

        if errors and "error" in self._flags:
            errors = [self._flags["error"]]
        return Outcome(final, errors or None)

    def _invalid_error(self, value: Any, state: State, options: ValidationOptions) -> Report:
        type_ = "any.empty" if isinstance(value, str) and value == "" else "any.invalid"
        return self.create_error(type_, None, state, options, value)

    # Helpers for subclasses

    def _set_flag(self, name: str, value: Any) -> "AnySchema":
        obj = self.clone()
        obj._flags[name] = value
        return obj

    def _test(self, name: str, arg: Any, func: Callable[..., Optional[Report]]) -> "AnySchema":
        obj = self.clone()
        obj._tests = obj._tests + (Rule(name, arg, func),)
        return obj

    def __str__(self) -> str:
        parts = [rule.name for rule in self._tests]
        if "presence" in self._flags:
            parts.insert(0, self._flags["presence"])
        return f"{self.__class__.__name__}({', '.join(parts)})"

    def __repr__(self) -> str:
        return self.__str__()


def check_limit(name: str, limit: Any, allow_ref: bool = True) -> None:
    """
    Check a numeric rule parameter at build time.

    Raises:
        SchemaError: If the limit is neither a number nor (when allowed) a reference
    """
    if allow_ref and isinstance(limit, Reference):
        return
    if not TypeUtils.is_number(limit):
        raise SchemaError(f"{name} limit must be a number{' or reference' if allow_ref else ''}")


def check_count(name: str, limit: Any) -> None:
    """Check a non-negative integer rule parameter at build time."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise SchemaError(f"{name} limit must be a non-negative integer")
