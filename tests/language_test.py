#!/usr/bin/env python3
"""
Tests for message templates and language overlays.
"""
import datetime

import pytest

# autopep8: off
from utils import setup
setup()
from fluent_schema import number, object_, string
from fluent_schema.language import DEFAULT_MESSAGES, MessageCatalog, deep_merge, stringify
# autopep8: on


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_merge(self):
        """Test that nested mappings are merged key by key."""
        target = {"a": {"b": 1, "c": 2}, "d": 3}
        result = deep_merge(target, {"a": {"b": 10}, "e": {"f": 4}})

        assert result is target
        assert result == {"a": {"b": 10, "c": 2}, "d": 3, "e": {"f": 4}}

    def test_replace_non_mapping(self):
        """Test that other values replace the target value."""
        assert deep_merge({"a": {"b": 1}}, {"a": "x"}) == {"a": "x"}
        assert deep_merge({"a": [1]}, {"a": [2]}) == {"a": [2]}


class TestStringify:
    """Tests for context value rendering."""

    def test_values(self):
        """Test rendering of scalar and list values."""
        assert stringify("a") == "a"
        assert stringify(None) == "null"
        assert stringify(2.0) == "2"
        assert stringify(["a", 1]) == "[a, 1]"
        assert stringify(["a", 1], wrap_arrays=False) == "a, 1"
        assert stringify(datetime.date(2020, 1, 2)) == "2020-01-02"


class TestMessageCatalog:
    """Tests for MessageCatalog."""

    def test_defaults(self):
        """Test the default catalog."""
        catalog = MessageCatalog()
        assert catalog.root == "value"
        assert catalog.key == '"{{!key}}" '
        assert catalog.wrap_arrays is True
        assert catalog.template("number.min") == DEFAULT_MESSAGES["number"]["min"]
        assert catalog.template("object.rename.override").startswith("cannot rename")
        assert catalog.template("object.rename") is None
        assert catalog.template("number.unknown") is None

    def test_key_prefix(self):
        """Test that templates without a key placeholder get the key prefix."""
        catalog = MessageCatalog()
        assert catalog.format("is required", {"key": "a"}) == '"a" is required'
        assert catalog.format('child "{{!key}}" fails', {"key": "a"}) == 'child "a" fails'
        assert catalog.format("!!no prefix {{limit}}", {"key": "a", "limit": 2}) == "no prefix 2"

    def test_escaping(self):
        """Test escaped and raw placeholders."""
        catalog = MessageCatalog()
        assert catalog.format("!!{{!value}}", {"value": "a<b"}) == "a&lt;b"
        assert catalog.format("!!{{value}}", {"value": "a<b"}) == "a<b"
        assert catalog.format("!![{{absent}}]", {}) == "[]"

    def test_overlay(self):
        """Test overriding templates and special entries."""
        catalog = MessageCatalog({
            "root": "input",
            "key": "{{!key}}: ",
            "messages": {"wrapArrays": False},
            "number": {"min": "too small"},
        })
        assert catalog.root == "input"
        assert catalog.format(catalog.template("number.min"), {"key": "age"}) == "age: too small"
        assert catalog.format("{{peers}}", {"key": "x", "peers": ["a", "b"]}) == "x: a, b"
        assert catalog.template("number.max") == DEFAULT_MESSAGES["number"]["max"]

    def test_defaults_not_mutated(self):
        """Test that overlays leave the defaults untouched."""
        MessageCatalog({"number": {"min": "changed"}})
        assert MessageCatalog().template("number.min") == "must be larger than or equal to {{limit}}"

    def test_defaults_read_only(self):
        """Test that every level of the default table rejects changes."""
        with pytest.raises(TypeError):
            DEFAULT_MESSAGES["root"] = "input"
        with pytest.raises(TypeError):
            DEFAULT_MESSAGES["number"]["min"] = "changed"
        with pytest.raises(TypeError):
            DEFAULT_MESSAGES["object"]["rename"]["override"] = "changed"

        catalog = MessageCatalog({"object": {"rename": {"override": "changed"}}})
        assert catalog.template("object.rename.override") == "changed"
        assert DEFAULT_MESSAGES["object"]["rename"]["override"].startswith("cannot rename")


class TestLanguageOption:
    """Tests for the language validation option."""

    def test_language_in_messages(self):
        """Test language overlays applied during validation."""
        schema = object_({"age": number().min(18)})
        language = {"root": "payload", "number": {"min": "must be at least {{limit}} years"}}

        result = schema.validate({"age": 3}, {"language": language})
        assert result.error.message == 'child "age" fails because ["age" must be at least 18 years]'

        result = schema.validate("x", {"language": language})
        assert result.error.message == '"payload" must be an object'

    def test_language_on_node(self):
        """Test language overlays attached to a schema node."""
        schema = string().options({"language": {"string": {"base": "should be text"}}})
        assert schema.validate(1).error.message == '"value" should be text'

    def test_escaped_key(self):
        """Test that keys are escaped in messages."""
        schema = object_({"a<b": number()})
        result = schema.validate({"a<b": "x"})
        assert result.error.message == 'child "a&lt;b" fails because ["a&lt;b" must be a number]'
