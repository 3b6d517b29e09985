#!/usr/bin/env python3
"""
Tests for object-specific validation features.
"""
import pytest

# autopep8: off
from utils import setup
setup()
from fluent_schema import SchemaError, any_, array, boolean, date, number, object_, ref, string, validate
# autopep8: on


class TestObjectValidation:
    """Tests for object schema validation."""

    def test_object_base(self):
        """Test the object type check."""
        schema = object_({"name": string()})

        result = schema.validate({"name": "John"})
        assert result
        assert result.value == {"name": "John"}

        result = schema.validate("not an object")
        assert not result
        assert result.error.details[0].type == "object.base"
        assert result.error.message == '"value" must be an object'

        result = schema.validate([1, 2])
        assert result.error.details[0].type == "object.base"

    def test_json_string_conversion(self):
        """Test parsing of JSON strings when converting."""
        schema = object_({"a": number()})

        assert schema.validate('{"a": 1}').value == {"a": 1}
        assert not schema.validate('{"a": 1}', {"convert": False})
        assert schema.validate("{not json").error.details[0].type == "object.base"

    def test_declaration_order(self):
        """Test that children are reported in declaration order."""
        schema = object_({"b": number(), "a": number()})
        result = schema.validate({"a": "x", "b": "y"}, {"abort_early": False})
        assert [detail.path for detail in result.error.details] == ["b", "a"]

    def test_required_children(self):
        """Test missing required keys."""
        schema = object_({"name": string().required(), "age": number()})

        result = schema.validate({"age": 3})
        assert result.error.message == 'child "name" fails because ["name" is required]'
        assert result.error.details[0].type == "any.required"
        assert result.error.details[0].path == "name"
        assert "value" not in result.error.details[0].context

    def test_input_not_mutated(self):
        """Test that conversions are applied to a copy."""
        data = {"a": "1", "b": {"c": "2"}}
        schema = object_({"a": number(), "b": object_({"c": number()})})

        result = schema.validate(data)
        assert result.value == {"a": 1, "b": {"c": 2}}
        assert data == {"a": "1", "b": {"c": "2"}}

    def test_unknown_keys(self):
        """Test handling of undeclared keys."""
        schema = object_({"a": number()})

        result = schema.validate({"a": 1, "b": 2, "c": 3}, {"abort_early": False})
        assert [detail.type for detail in result.error.details] == ["object.allowUnknown", "object.allowUnknown"]
        assert [detail.path for detail in result.error.details] == ["b", "c"]
        assert result.error.details[0].context["child"] == "b"

        assert schema.validate({"a": 1, "b": 2}, {"allow_unknown": True}).value == {"a": 1, "b": 2}
        assert schema.validate({"a": 1, "b": 2}, {"stripUnknown": True}).value == {"a": 1}
        assert schema.unknown().validate({"a": 1, "b": 2}).value == {"a": 1, "b": 2}
        assert not schema.unknown(False).validate({"a": 1, "b": 2}, {"allow_unknown": True})

    def test_strip_unknown_respects_node_flag(self):
        """Test that an explicit unknown() keeps undeclared keys."""
        schema = object_({"a": number()}).unknown()
        result = schema.validate({"a": 1, "b": 2}, {"strip_unknown": True})
        assert result.value == {"a": 1, "b": 2}

    def test_keys_variants(self):
        """Test keys() with no schema, an empty schema, and extensions."""
        assert object_().validate({"anything": 1})
        assert not object_({}).validate({"anything": 1})
        assert object_({}).validate({})

        schema = object_({"a": number()}).keys({"b": string()})
        assert schema.validate({"a": 1, "b": "x"})

        replaced = schema.keys({"a": string()})
        assert replaced.validate({"a": "x"})
        assert not replaced.validate({"a": 1})

    def test_pattern_keys(self):
        """Test validation of undeclared keys matching a pattern."""
        schema = object_({"name": string()}).pattern(r"^x-", number())

        assert schema.validate({"name": "a", "x-count": 1})
        result = schema.validate({"name": "a", "x-count": "many"})
        assert result.error.message == 'child "x-count" fails because ["x-count" must be a number]'
        assert schema.validate({"name": "a", "other": 1}).error.details[0].type == "object.allowUnknown"

    def test_default_and_strip(self):
        """Test defaults for missing children and stripped children."""
        schema = object_({
            "a": number().default(5),
            "b": string().strip(),
            "c": any_().default(list),
        })

        result = schema.validate({"b": "secret"})
        assert result.value == {"a": 5, "c": []}

    def test_rename(self):
        """Test moving keys before validation."""
        schema = object_({"b": number()}).rename("a", "b")
        assert schema.validate({"a": 1}).value == {"b": 1}

        aliased = object_({"a": number(), "b": number()}).rename("a", "b", alias=True)
        assert aliased.validate({"a": 1}).value == {"a": 1, "b": 1}

    def test_rename_override(self):
        """Test renaming onto an existing key."""
        schema = object_({"b": number()}).rename("a", "b")

        result = schema.validate({"a": 1, "b": 2})
        assert result.error.details[0].type == "object.rename.override"
        assert result.error.details[0].context == {"from": "a", "to": "b", "key": "value"}
        assert result.error.message == (
            '"value" cannot rename child "a" because override is disabled and target "b" exists'
        )

        allowed = object_({"b": number()}).rename("a", "b", override=True)
        assert allowed.validate({"a": 1, "b": 2}).value == {"b": 1}

    def test_rename_multiple(self):
        """Test several renames to the same key."""
        schema = object_({"c": number()}).rename("a", "c").rename("b", "c")
        result = schema.validate({"a": 1, "b": 2})
        assert result.error.details[0].type == "object.rename.multiple"

        allowed = object_({"c": number()}).rename("a", "c").rename("b", "c", multiple=True)
        assert allowed.validate({"a": 1, "b": 2}).value == {"c": 2}

    def test_rename_same_key_twice(self):
        """Test that a key cannot be renamed twice."""
        with pytest.raises(SchemaError):
            object_().rename("a", "b").rename("a", "c")

    def test_with_and_without(self):
        """Test peer presence dependencies."""
        schema = object_({"a": any_(), "b": any_(), "c": any_()}).with_("a", ["b", "c"])
        assert schema.validate({"a": 1, "b": 2, "c": 3})
        assert schema.validate({"b": 2})

        result = schema.validate({"a": 1, "b": 2})
        assert result.error.message == '"a" requires the presence of c'
        assert result.error.details[0].type == "object.with"
        assert result.error.details[0].context["main"] == "a"
        assert result.error.details[0].context["peer"] == "c"

        schema = object_({"a": any_(), "b": any_()}).without("a", "b")
        assert schema.validate({"a": 1})
        result = schema.validate({"a": 1, "b": 2})
        assert result.error.message == '"a" conflict with forbidden peer b'
        assert result.error.details[0].path == ""

    def test_xor_and_or(self):
        """Test exclusive and inclusive peer groups."""
        schema = object_({"a": any_(), "b": any_()}).xor("a", "b")
        assert schema.validate({"a": 1})
        assert schema.validate({}).error.message == '"value" must contain at least one of [a, b]'
        assert schema.validate({"a": 1, "b": 2}).error.details[0].type == "object.xor"

        schema = object_({"a": any_(), "b": any_()}).or_("a", "b")
        assert schema.validate({"a": 1, "b": 2})
        assert schema.validate({}).error.details[0].type == "object.missing"

    def test_and_and_nand(self):
        """Test all-or-nothing and not-all peer groups."""
        schema = object_({"a": any_(), "b": any_()}).and_("a", "b")
        assert schema.validate({})
        assert schema.validate({"a": 1, "b": 2})
        assert schema.validate({"a": 1}).error.details[0].type == "object.and"

        schema = object_({"a": any_(), "b": any_()}).nand("a", "b")
        assert schema.validate({"a": 1})
        result = schema.validate({"a": 1, "b": 2})
        assert result.error.message == '"a" must not exist simultaneously with [b]'

    def test_dependency_peers_must_be_strings(self):
        """Test build-time validation of peers."""
        with pytest.raises(SchemaError):
            object_().xor()
        with pytest.raises(SchemaError):
            object_().with_("a", [1])

    def test_assert(self):
        """Test assertions on nested values."""
        schema = object_({
            "a": object_({"b": string(), "c": number()}),
            "d": object_({"e": any_()}),
        }).assert_("d.e", ref("a.c"), "equal to a.c")

        assert schema.validate({"a": {"b": "x", "c": 5}, "d": {"e": 5}})

        result = schema.validate({"a": {"b": "x", "c": 5}, "d": {"e": 6}})
        detail = result.error.details[0]
        assert detail.type == "object.assert"
        assert detail.path == "d.e"
        assert detail.context["key"] == "e"
        assert result.error.message == '"d.e" validation failed because "d.e" failed to equal to a.c'

    def test_counts(self):
        """Test min, max and length on the number of keys."""
        schema = object_().min(1).max(2)
        assert schema.validate({"a": 1})
        assert schema.validate({}).error.details[0].type == "object.min"
        assert schema.validate({"a": 1, "b": 2, "c": 3}).error.message == (
            '"value" must have less than or equal to 2 children'
        )
        assert object_().length(1).validate({}).error.details[0].context["limit"] == 1

    def test_references_between_children(self):
        """Test references resolving against sibling values."""
        schema = object_({"a": number(), "b": number().min(ref("a"))})

        assert schema.validate({"a": 1, "b": 2})
        assert schema.validate({"a": 3, "b": 2}).error.details[0].type == "number.min"
        assert schema.validate({"a": "x", "b": 2}, {"abort_early": False}).error.details[-1].type == "number.ref"

    def test_label_in_child_message(self):
        """Test that child labels are used in composed messages."""
        schema = object_({"first_name": string().label("First name")})
        result = schema.validate({"first_name": 1})
        assert result.error.message == 'child "First name" fails because ["First name" must be a string]'
        assert result.error.details[0].path == "first_name"
        assert result.error.details[0].context["label"] == "First name"

    def test_collect_all_failures(self):
        """Test collecting failures across nested objects."""
        schema = {
            "a": object_({"b": number(), "c": string().min(3).alphanum()}),
            "d": number().max(1),
        }
        result = validate({"a": {"b": "x", "c": "-"}, "d": 2}, schema, {"abort_early": False})
        assert [detail.path for detail in result.error.details] == ["a.b", "a.c", "a.c", "d"]
        assert result.error.message == (
            'child "a" fails because [child "b" fails because ["b" must be a number], '
            'child "c" fails because ["c" length must be at least 3 characters long, '
            '"c" must only contain alpha-numeric characters]]. '
            'child "d" fails because ["d" must be less than or equal to 1]'
        )

    def test_abort_early_across_failure_kinds(self):
        """Test that the first unknown key or dependency failure ends validation."""
        schema = object_({"a": number()}).without("a", "b")

        result = schema.validate({"a": 1, "b": 2, "c": 3})
        assert len(result.error.details) == 1
        assert result.error.message == '"b" is not allowed'

        result = schema.validate({"a": 1, "b": 2, "c": 3}, {"abort_early": False})
        assert [detail.type for detail in result.error.details] == [
            "object.allowUnknown", "object.allowUnknown", "object.without"
        ]

        schema = object_({"a": any_(), "b": any_()}).without("a", "b").xor("a", "b")
        result = schema.validate({"a": 1, "b": 2})
        assert [detail.type for detail in result.error.details] == ["object.without"]
        assert len(schema.validate({"a": 1, "b": 2}, {"abort_early": False}).error.details) == 2

    def test_rename_absent_source(self):
        """Test that renames without a source key leave the target alone."""
        schema = object_({"b": string()}).rename("a", "b")
        assert schema.validate({"b": "x"}).value == {"b": "x"}

        overriding = object_({"b": string()}).rename("a", "b", override=True)
        assert overriding.validate({"b": "x"}).value == {"b": "x"}

        both = object_({"c": number()}).rename("a", "c").rename("b", "c")
        assert both.validate({"b": 2}).value == {"c": 2}

    def test_accepted_values_accepted_again(self):
        """Test that validated objects pass the same schema unchanged."""
        cases = [
            (object_({"b": string()}).rename("a", "b"), {"a": "x"}),
            (object_({"a": number().default(5), "b": any_().default(list)}), {}),
            (object_({"n": number(), "flag": boolean(), "when": date()}),
             {"n": "1.5", "flag": "yes", "when": "2020-01-01"}),
            (object_({"a": number(), "secret": string().strip()}), {"a": 1, "secret": "x"}),
            (object_({"tags": array().items(string()).single()}), {"tags": "one"}),
            (object_({"a": number()}), '{"a": "2"}'),
        ]
        for schema, data in cases:
            first = schema.validate(data)
            assert first, data
            second = schema.validate(first.value)
            assert second, first.value
            assert second.value == first.value

        result = object_({"a": number()}).validate({"a": 1, "b": 2}, {"strip_unknown": True})
        assert object_({"a": number()}).validate(result.value)
