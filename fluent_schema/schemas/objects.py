"""
Object schema implementation.
"""

import json
import re
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Pattern, Sequence, Tuple, Union

from .base import AnySchema, Outcome, State, check_count
from ..api import SchemaError
from ..errors import Report
from ..options import ValidationOptions
from ..reference import Reference
from ..utils import KeyPath, MISSING


class Rename(NamedTuple):
    """A key rename applied before the children are validated."""
    from_: str
    to: str
    alias: bool = False
    multiple: bool = False
    override: bool = False


class Dependency(NamedTuple):
    """
    A cross-key constraint evaluated after the children.

    Attributes:
        type: One of ``with``, ``without``, ``xor``, ``or``, ``and``, ``nand``
        key: Main key for ``with``/``without``, None otherwise
        peers: Peer keys
    """
    type: str
    key: Optional[str]
    peers: Tuple[str, ...]


def _compile(schema: Any) -> AnySchema:
    from ..schema_compiler import compile_schema
    return compile_schema(schema)


def _peers(peers: Sequence[Any]) -> Tuple[str, ...]:
    flat: List[Any] = []
    for peer in peers:
        if isinstance(peer, (list, tuple)):
            flat.extend(peer)
        else:
            flat.append(peer)
    if not flat:
        raise SchemaError("At least one peer is required")
    for peer in flat:
        if not isinstance(peer, str):
            raise SchemaError(f"Peer keys must be strings, got {peer!r}")
    return tuple(flat)


class ObjectSchema(AnySchema):
    """
    Schema for mappings.

    Children are validated in declaration order on a shallow copy of the
    input, followed by pattern keys, unknown keys and dependencies. With
    conversion enabled, a JSON string holding an object is parsed first.
    """

    _type = "object"

    def __init__(self):
        super().__init__()
        self._inner = {
            "children": None,
            "renames": [],
            "dependencies": [],
            "patterns": [],
        }

    def keys(self, schema: Optional[Mapping[str, Any]] = None) -> "ObjectSchema":
        """
        Declare (or extend) the allowed keys.

        ``keys()`` without arguments allows any key; ``keys({})`` allows
        none. Later declarations replace earlier ones for the same key.

        Args:
            schema: Mapping of key to schema or structural literal

        Raises:
            SchemaError: If a child schema is invalid
        """
        obj = self.clone()
        if schema is None:
            obj._inner["children"] = None
            return obj
        if not isinstance(schema, Mapping):
            raise SchemaError("Object keys must be given as a mapping")

        children = [child for child in obj._inner["children"] or [] if child[0] not in schema]
        for key, child in schema.items():
            try:
                children.append((key, _compile(child)))
            except SchemaError as e:
                raise SchemaError(f"Invalid schema for key {key!r}: {e}") from e
        obj._inner["children"] = children
        return obj

    def pattern(self, regex: Union[str, Pattern], schema: Any) -> "ObjectSchema":
        """Validate undeclared keys matching ``regex`` against ``schema``."""
        if isinstance(regex, str):
            try:
                regex = re.compile(regex)
            except re.error as e:
                raise SchemaError(f"Invalid key pattern {regex!r}: {e}") from e
        obj = self.clone()
        obj._inner["patterns"].append((regex, _compile(schema)))
        return obj

    def unknown(self, allow: bool = True) -> "ObjectSchema":
        return self._set_flag("allowUnknown", allow)

    def rename(self, from_: str, to: str, alias: bool = False, multiple: bool = False,
               override: bool = False) -> "ObjectSchema":
        """
        Move the value of ``from_``, when present, to ``to`` before validating the children.

        Args:
            from_: Source key
            to: Target key
            alias: Keep the source key as well
            multiple: Allow several renames to the same target
            override: Allow replacing an existing target value

        Raises:
            SchemaError: If ``from_`` is already renamed
        """
        if not isinstance(from_, str) or not isinstance(to, str):
            raise SchemaError("Rename keys must be strings")
        for rename in self._inner["renames"]:
            if rename.from_ == from_:
                raise SchemaError(f"Cannot rename the same key multiple times: {from_}")
        obj = self.clone()
        obj._inner["renames"].append(Rename(from_, to, alias, multiple, override))
        return obj

    def with_(self, key: str, peers: Union[str, Sequence[str]]) -> "ObjectSchema":
        return self._dependency("with", key, peers)

    def without(self, key: str, peers: Union[str, Sequence[str]]) -> "ObjectSchema":
        return self._dependency("without", key, peers)

    def xor(self, *peers: Union[str, Sequence[str]]) -> "ObjectSchema":
        return self._dependency("xor", None, peers)

    def or_(self, *peers: Union[str, Sequence[str]]) -> "ObjectSchema":
        return self._dependency("or", None, peers)

    def and_(self, *peers: Union[str, Sequence[str]]) -> "ObjectSchema":
        return self._dependency("and", None, peers)

    def nand(self, *peers: Union[str, Sequence[str]]) -> "ObjectSchema":
        return self._dependency("nand", None, peers)

    def assert_(self, ref: Union[str, Reference], schema: Any, message: Optional[str] = None) -> "ObjectSchema":
        """
        Validate a nested value of the object against another schema.

        References inside ``schema`` resolve against this object.

        Args:
            ref: Dotted path of the value within the object
            schema: Schema (or literal) the value must match
            message: Describes the requirement in the failure message
        """
        if isinstance(ref, str):
            ref = Reference(ref)
        elif not isinstance(ref, Reference):
            raise SchemaError("Assertion target must be a key path or reference")
        compiled = _compile(schema)
        parts = tuple(KeyPath.to_parts(ref.key))
        message = message or "pass the assertion test"

        def test(node, value, state, options):
            result = compiled._validate(KeyPath.reach(value, ref.key), State(reference=value), options)
            if not result.errors:
                return None
            path = state.path + parts
            local = State(parts[-1], path, state.parent, state.reference)
            return node.create_error("object.assert", {"ref": KeyPath.from_parts(path), "message": message},
                                     local, options)

        return self._test("assert", {"ref": ref, "schema": compiled}, test)

    def min(self, limit: int) -> "ObjectSchema":
        return self._count("min", limit, lambda count, limit: count >= limit)

    def max(self, limit: int) -> "ObjectSchema":
        return self._count("max", limit, lambda count, limit: count <= limit)

    def length(self, limit: int) -> "ObjectSchema":
        return self._count("length", limit, lambda count, limit: count == limit)

    def _base(self, value: Any, state: State, options: ValidationOptions) -> Outcome:
        target = value
        if isinstance(value, str) and options.convert:
            try:
                target = json.loads(value)
            except ValueError:
                pass
        if not isinstance(target, dict):
            return Outcome(value, [self.create_error("object.base", None, state, options, value)])

        children = self._inner["children"]
        patterns = self._inner["patterns"]
        if children is None and not patterns and not self._inner["renames"] and not self._inner["dependencies"]:
            return Outcome(target)

        if target is value:
            target = dict(value)
        errors: List[Any] = []

        def finish() -> Outcome:
            return Outcome(target, errors or None)

        renamed = set()
        for rename in self._inner["renames"]:
            if rename.from_ not in target:
                continue
            if not rename.multiple and rename.to in renamed:
                errors.append(self.create_error("object.rename.multiple", {"from": rename.from_, "to": rename.to},
                                                state, options))
                if options.abort_early:
                    return finish()
            if rename.to in target and not rename.override and rename.to not in renamed:
                errors.append(self.create_error("object.rename.override", {"from": rename.from_, "to": rename.to},
                                                state, options))
                if options.abort_early:
                    return finish()
            target[rename.to] = target[rename.from_]
            renamed.add(rename.to)
            if not rename.alias:
                target.pop(rename.from_, None)

        declared = {key for key, _ in children or ()}
        unprocessed = [key for key in target if key not in declared]

        for key, child in children or ():
            child_state = state.child(key, target)
            result = child._validate(target.get(key, MISSING), child_state, options)
            if result.errors:
                errors.append(self.create_error("object.child", {"reason": result.errors}, child_state, options,
                                                flags=child.flags))
                if options.abort_early:
                    return finish()
            elif result.value is MISSING:
                target.pop(key, None)
            else:
                target[key] = result.value

        for key in list(unprocessed):
            for regex, rule in patterns:
                if not regex.search(str(key)):
                    continue
                unprocessed.remove(key)
                key_state = state.child(key, target)
                result = rule._validate(target[key], key_state, options)
                if result.errors:
                    errors.append(self.create_error("object.child", {"reason": result.errors}, key_state, options,
                                                    flags=rule.flags))
                    if options.abort_early:
                        return finish()
                elif result.value is MISSING:
                    target.pop(key, None)
                else:
                    target[key] = result.value
                break

        if unprocessed and (children is not None or patterns):
            if options.strip_unknown and self._flags.get("allowUnknown") is not True:
                for key in unprocessed:
                    target.pop(key, None)
                unprocessed = []
            if not self._flags.get("allowUnknown", options.allow_unknown):
                for key in unprocessed:
                    errors.append(self.create_error("object.allowUnknown", {"child": key},
                                                    state.child(key, target), options, flags={}))
                    if options.abort_early:
                        return finish()

        for dependency in self._inner["dependencies"]:
            report = _DEPENDENCY_CHECKS[dependency.type](self, dependency, target, state, options)
            if report is not None:
                errors.append(report)
                if options.abort_early:
                    return finish()

        return finish()

    def _dependency(self, type_: str, key: Optional[str], peers: Any) -> "ObjectSchema":
        if key is not None and not isinstance(key, str):
            raise SchemaError(f"Dependency key must be a string, got {key!r}")
        if isinstance(peers, str):
            peers = [peers]
        obj = self.clone()
        obj._inner["dependencies"].append(Dependency(type_, key, _peers(peers)))
        return obj

    def _count(self, name: str, limit: int, compare: Callable[[int, int], bool]) -> "ObjectSchema":
        check_count(f"object.{name}", limit)

        def test(schema, value, state, options):
            if compare(len(value), limit):
                return None
            return schema.create_error(f"object.{name}", {"limit": limit}, state, options, value)

        return self._test(name, limit, test)


def _main_state(key: str, state: State) -> State:
    # Reported on the object itself, under the name of the main key
    return State(key, state.path, state.parent, state.reference)


def _check_with(schema, dependency, target, state, options) -> Optional[Report]:
    if dependency.key not in target:
        return None
    for peer in dependency.peers:
        if peer not in target:
            return schema.create_error("object.with", {"main": dependency.key, "peer": peer},
                                       _main_state(dependency.key, state), options, flags={})
    return None


def _check_without(schema, dependency, target, state, options) -> Optional[Report]:
    if dependency.key not in target:
        return None
    for peer in dependency.peers:
        if peer in target:
            return schema.create_error("object.without", {"main": dependency.key, "peer": peer},
                                       _main_state(dependency.key, state), options, flags={})
    return None


def _check_xor(schema, dependency, target, state, options) -> Optional[Report]:
    present = [peer for peer in dependency.peers if peer in target]
    if len(present) == 1:
        return None
    if not present:
        return schema.create_error("object.missing", {"peers": list(dependency.peers)}, state, options)
    return schema.create_error("object.xor", {"peers": present}, state, options)


def _check_or(schema, dependency, target, state, options) -> Optional[Report]:
    if any(peer in target for peer in dependency.peers):
        return None
    return schema.create_error("object.missing", {"peers": list(dependency.peers)}, state, options)


def _check_and(schema, dependency, target, state, options) -> Optional[Report]:
    present = [peer for peer in dependency.peers if peer in target]
    missing = [peer for peer in dependency.peers if peer not in target]
    if not present or not missing:
        return None
    return schema.create_error("object.and", {"present": present, "missing": missing}, state, options)


def _check_nand(schema, dependency, target, state, options) -> Optional[Report]:
    if not all(peer in target for peer in dependency.peers):
        return None
    main, peers = dependency.peers[0], list(dependency.peers[1:])
    return schema.create_error("object.nand", {"main": main, "peers": peers}, state, options)


_DEPENDENCY_CHECKS: Dict[str, Callable[..., Optional[Report]]] = {
    "with": _check_with,
    "without": _check_without,
    "xor": _check_xor,
    "or": _check_or,
    "and": _check_and,
    "nand": _check_nand,
}
