"""Tests for the validation engine."""

import json

import pytest

from schemacheck.errors import InvalidSchemaError, InvalidValueError
from schemacheck.models.schema import SchemaObject, StringValidation
from schemacheck.services.loader import load_schema
from schemacheck.services.validation import check, validate_against_schema, validate_schema

ANY_VALUES = [None, True, False, 0, -3, 1.5, "", "text", [], [1, "a"], {}, {"a": {"b": None}}]


def _check(document, value):
    root = load_schema(document, check_meta=False)
    return check("$", root.schema, root.definitions, value)


def _value_error(document, value) -> InvalidValueError:
    error = _check(document, value)
    assert isinstance(error, InvalidValueError), error
    return error


def _schema_error(document, value) -> InvalidSchemaError:
    error = _check(document, value)
    assert isinstance(error, InvalidSchemaError), error
    return error


# ---------------------------------------------------------------------------
# Boolean schemas and dispatch
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value", ANY_VALUES)
def test_true_schema_accepts_everything(value):
    assert _check(True, value) is None
    assert _check({}, value) is None


@pytest.mark.parametrize("value", ANY_VALUES)
def test_false_schema_rejects_everything(value):
    error = _value_error(False, value)
    assert error.path == "$"
    assert error.details == "trying to match against the empty set schema"


def test_first_failing_group_wins():
    """The type group runs before the string group."""
    error = _value_error({"type": "string", "maxLength": 1}, 5)
    assert error.details == "value is not of type string"


def test_validate_schema_raises():
    with pytest.raises(InvalidValueError):
        validate_schema("$", False, {}, 1)


def test_models_built_in_code_are_accepted():
    schema = SchemaObject(string=StringValidation(max_length=2))
    assert check("$", schema, {}, "ab") is None
    assert isinstance(check("$", schema, {}, "abc"), InvalidValueError)


# ---------------------------------------------------------------------------
# type / const / enum
# ---------------------------------------------------------------------------


def test_integer_type():
    assert _check({"type": "integer"}, 3) is None
    assert _check({"type": "integer"}, -(2**70)) is None
    _value_error({"type": "integer"}, 3.0)
    _value_error({"type": "integer"}, True)


def test_number_type_excludes_booleans():
    assert _check({"type": "number"}, 3) is None
    assert _check({"type": "number"}, 3.5) is None
    _value_error({"type": "number"}, False)


def test_type_list():
    document = {"type": ["string", "null"]}
    assert _check(document, None) is None
    assert _check(document, "x") is None
    error = _value_error(document, 5)
    assert error.details == "value is not any of [string, null]"


def test_both_const_and_enum_is_a_schema_error():
    for value in ANY_VALUES:
        error = _schema_error({"const": 1, "enum": [1]}, value)
        assert error.details == "both `const` and `enum` present"


def test_const():
    assert _check({"const": {"a": [1, 2]}}, {"a": [1, 2]}) is None
    error = _value_error({"const": "x"}, "y")
    assert error.path == "$.const"


def test_const_null_is_a_constraint():
    assert _check({"const": None}, None) is None
    assert _value_error({"const": None}, 0).path == "$.const"


def test_enum():
    document = {"enum": ["a", 1, None]}
    assert _check(document, "a") is None
    assert _check(document, None) is None
    error = _value_error(document, "b")
    assert error.path == "$.enum"
    assert error.details == "not a valid enumerated value"


def test_enum_does_not_confuse_booleans_and_numbers():
    _value_error({"enum": [1]}, True)
    _value_error({"enum": [0]}, False)


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def test_all_of_reports_failing_count():
    document = {"allOf": [{"type": "integer"}, {"minimum": 0}, {"maximum": 10}]}
    assert _check(document, 5) is None

    error = _value_error(document, 20)
    assert error.path == "$.allOf"
    assert error.details == "value did not validate for 1 of 3 `allOf` schemas"

    error = _value_error(document, "x")
    assert error.details == "value did not validate for 3 of 3 `allOf` schemas"


def test_any_of():
    document = {"anyOf": [{"type": "string"}, {"type": "integer"}]}
    assert _check(document, "x") is None
    assert _check(document, 2) is None
    error = _value_error(document, None)
    assert error.path == "$.anyOf"


@pytest.mark.parametrize(
    "value, passing",
    [(1.5, 1), (5, 2), (None, 0)],
)
def test_one_of_counts_matches(value, passing):
    document = {"oneOf": [{"type": "integer"}, {"type": "number"}, {"type": "string"}]}
    error = _check(document, value)
    if passing == 1:
        assert error is None
    else:
        assert isinstance(error, InvalidValueError)
        assert error.path == "$.oneOf"
        assert error.details == f"value validated against {passing} of 3 `oneOf` schemas (rather than 1)"


def test_not():
    assert _check({"not": {"type": "string"}}, 1) is None
    error = _value_error({"not": {"type": "string"}}, "x")
    assert error.path == "$.not"


def test_if_then_else():
    document = {"if": {"type": "integer"}, "then": {"minimum": 0}, "else": {"type": "string"}}
    assert _check(document, 5) is None
    assert _check(document, "x") is None

    error = _value_error(document, -1)
    assert error.path == "$.then"
    assert error.details == "the value -1 <= the minimum 0"

    assert _value_error(document, None).path == "$.else"


def test_if_without_matching_branch_passes():
    assert _check({"if": {"type": "integer"}, "else": False}, 3) is None
    assert _check({"if": {"type": "integer"}, "then": False}, "x") is None


@pytest.mark.parametrize(
    "document, details",
    [
        ({"if": {}}, "an `if` schema must have a `then` or `else`"),
        ({"then": {}}, "cannot have a `then` schema without an `if` schema"),
        ({"else": {}}, "cannot have an `else` schema without an `if` schema"),
        ({"then": {}, "else": {}}, "cannot have `then` and `else` schemas without an `if` schema"),
    ],
)
def test_malformed_conditionals(document, details):
    assert _schema_error(document, 1).details == details


def test_schema_errors_inside_combinators_propagate():
    _schema_error({"anyOf": [{"const": 1, "enum": [1]}, True]}, 1)
    _schema_error({"not": {"then": {}}}, 1)


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def test_maximum_rejects_the_bound():
    assert _check({"maximum": 10}, 9) is None
    assert _value_error({"maximum": 10}, 10).details == "the value 10 >= the maximum 10"
    _value_error({"maximum": 10}, 11)


def test_exclusive_maximum_admits_the_bound():
    assert _check({"exclusiveMaximum": 10}, 10) is None
    error = _value_error({"exclusiveMaximum": 10}, 10.5)
    assert error.details == "the value 10.5 > the exclusive maximum 10"


def test_minimum_bounds():
    _value_error({"minimum": 0}, 0)
    assert _check({"minimum": 0}, 0.1) is None
    assert _check({"exclusiveMinimum": 0}, 0) is None
    _value_error({"exclusiveMinimum": 0}, -1)


def test_multiple_of():
    assert _check({"multipleOf": 3}, 9) is None
    assert _check({"multipleOf": 0.1}, 0.3) is None
    error = _value_error({"multipleOf": 3}, 10)
    assert error.details == "the value 10 is not a multiple of 3"


def test_multiple_of_only_rejects_positive_remainders():
    # 8 / 3 rounds up to 3, leaving a negative remainder
    assert _check({"multipleOf": 3}, 8) is None


def test_multiple_of_with_integer_beyond_float_range():
    huge = int("1" + "0" * 400)
    assert validate_against_schema(huge, {"multipleOf": 3}) == []
    assert _value_error({"maximum": 10}, huge).details.startswith("the value 1000")


def test_number_group_requires_a_number():
    assert _value_error({"minimum": 0}, "5").details == "expected a number"
    assert _value_error({"minimum": 0}, True).details == "expected a number"


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------


def test_string_lengths():
    assert _check({"maxLength": 3, "minLength": 1}, "abc") is None
    assert _value_error({"maxLength": 3}, "abcd").details == "The string is longer than 3 characters"
    assert _value_error({"minLength": 1}, "").details == "The string is shorter than 1 characters"


def test_string_lengths_count_utf8_bytes():
    _value_error({"maxLength": 1}, "é")
    assert _check({"minLength": 2}, "é") is None


def test_string_lengths_with_lone_surrogate():
    value = json.loads('"\\ud800"')
    assert validate_against_schema(value, {"maxLength": 3}) == []
    assert _value_error({"maxLength": 2}, value).details == "The string is longer than 2 characters"


def test_pattern_with_escaped_slashes():
    document = {"pattern": r"^[0-9]{1,2}\/[0-9]{1,2}\/[0-9]{4}$"}
    assert _check(document, "9/8/2017") is None
    error = _value_error(document, "2017-08-09")
    assert error.details.startswith("2017-08-09 does not match the pattern")


def test_pattern_is_unanchored_search():
    assert _check({"pattern": "b"}, "abc") is None


def test_pattern_dollar_is_end_of_input():
    _value_error({"pattern": "^a$"}, "a\n")


def test_invalid_pattern_is_a_schema_error():
    error = _schema_error({"pattern": "("}, "x")
    assert error.details == "( is not a valid regex"


def test_string_group_requires_a_string():
    assert _value_error({"pattern": "x"}, 1).details == "expected a string"


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------


def test_item_counts():
    assert _check({"minItems": 1, "maxItems": 2}, [1]) is None
    assert _value_error({"maxItems": 2}, [1, 2, 3]).details == "3 items is greater than the maximum of 2"
    assert _value_error({"minItems": 1}, []).details == "0 items is less than the minimum of 1"


def test_unique_items():
    assert _check({"uniqueItems": True}, [1, 2, 3]) is None
    error = _value_error({"uniqueItems": True}, [1, 2, 2])
    assert error.details == "items should be unique, but items at [1] and [2] are the same"
    _value_error({"uniqueItems": True}, [{"a": [1]}, {"a": [1]}])


def test_unique_items_distinguishes_kinds():
    assert _check({"uniqueItems": True}, [1, True, "1", None]) is None
    assert _check({"uniqueItems": False}, [1, 1]) is None


def test_single_items_schema():
    assert _check({"items": {"type": "integer"}}, [1, 2]) is None
    error = _value_error({"items": {"type": "integer"}}, [1, "x"])
    assert error.path == "$[1]"


def test_tuple_items():
    document = {"items": [{"type": "integer"}, {"type": "string"}]}
    assert _check(document, [1]) is None
    assert _check(document, [1, "a", None]) is None
    assert _value_error(document, ["a"]).path == "$[0]"


def test_tuple_additional_items():
    document = {"items": [{"type": "integer"}], "additionalItems": {"type": "string"}}
    assert _check(document, [1, "a", "b"]) is None
    assert _value_error(document, [1, "a", 2]).path == "$[2]"
    assert _value_error({"items": [True], "additionalItems": False}, [1, 2]).path == "$[1]"


def test_contains():
    document = {"contains": {"type": "string"}}
    assert _check(document, [1, "x"]) is None
    error = _value_error(document, [1, 2])
    assert error.path == "$.contains"
    _value_error(document, [])


def test_array_group_requires_an_array():
    assert _value_error({"maxItems": 1}, {"a": 1}).details == "expected an array"


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


def test_no_additional_properties():
    document = {"additionalProperties": False}
    assert _check(document, {}) is None
    assert _value_error(document, {"a": 1}).path == "$.a"


def test_property_counts():
    assert _check({"maxProperties": 1}, {"a": 1}) is None
    _value_error({"maxProperties": 1}, {"a": 1, "b": 2})
    _value_error({"minProperties": 1}, {})


def test_required():
    error = _value_error({"required": ["a", "b"]}, {"a": 1})
    assert error.path == "$"
    assert error.details == "the property b is required but absent"


def test_named_properties():
    document = {"properties": {"a": {"type": "string"}}}
    assert _check(document, {"a": "x", "other": 1}) is None
    assert _value_error(document, {"a": 1}).path == "$.a"


def test_pattern_properties_and_additional():
    document = {
        "properties": {"x-id": {"type": "integer"}},
        "patternProperties": {"^x-": {"type": "integer"}},
        "additionalProperties": False,
    }
    assert _check(document, {"x-id": 1, "x-other": 2}) is None
    assert _value_error(document, {"x-other": "s"}).path == "$.x-other"
    assert _value_error(document, {"y": 1}).path == "$.y"


def test_key_checked_against_named_and_pattern_schemas():
    document = {
        "properties": {"x-a": {"type": "number"}},
        "patternProperties": {"^x-": {"type": "integer"}},
    }
    assert _check(document, {"x-a": 1}) is None
    _value_error(document, {"x-a": 1.5})


def test_property_names():
    error = _value_error({"propertyNames": {"maxLength": 3}}, {"abc": 1, "abcd": 2})
    assert error.path == "$.abcd"
    assert error.value == "abcd"


def test_invalid_pattern_property_is_a_schema_error():
    _schema_error({"patternProperties": {"(": True}}, {"a": 1})


def test_object_group_requires_an_object():
    assert _value_error({"required": []}, []).details == "expected an object"


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


def test_reference_resolution():
    document = {"$ref": "#/definitions/Foo", "definitions": {"Foo": {"type": "string"}}}
    assert _check(document, "x") is None
    error = _value_error(document, 5)
    assert error.path == "#/definitions/Foo"


def test_reference_into_defs():
    document = {"$ref": "#/$defs/Foo", "$defs": {"Foo": {"type": "string"}}}
    assert _check(document, "x") is None


@pytest.mark.parametrize("reference", ["#/definitions/Missing", "Foo"])
def test_unresolvable_reference(reference):
    document = {"$ref": reference, "definitions": {"Foo": True}}
    error = _schema_error(document, 1)
    assert error.details == f"invalid reference: {reference}"


def test_recursive_definition():
    document = {
        "$ref": "#/definitions/Node",
        "definitions": {
            "Node": {
                "type": "object",
                "properties": {"children": {"type": "array", "items": {"$ref": "#/definitions/Node"}}},
            }
        },
    }
    assert _check(document, {"children": [{"children": []}]}) is None
    error = _value_error(document, {"children": [{"children": [5]}]})
    assert error.path == "#/definitions/Node"


def test_reference_cycle_is_a_schema_error():
    document = {
        "$ref": "#/definitions/A",
        "definitions": {"A": {"$ref": "#/definitions/B"}, "B": {"$ref": "#/definitions/A"}},
    }
    error = _schema_error(document, 1)
    assert "reference cycle" in error.details


# ---------------------------------------------------------------------------
# Raw documents
# ---------------------------------------------------------------------------


def test_validate_against_schema_returns_messages():
    document = {"type": "object", "required": ["name"]}
    assert validate_against_schema({"name": "Jane"}, document) == []
    errors = validate_against_schema({}, document)
    assert errors == ["{} did not conform to the schema at $: the property name is required but absent"]


@pytest.mark.parametrize("key", ["string", "number", "array", "object", "subschemas", "reference", "instance_type"])
def test_python_field_names_in_documents_are_ignored(key):
    assert validate_against_schema("abc", {key: {"maxLength": 1}}) == []


def test_validate_against_schema_raises_on_broken_schema():
    with pytest.raises(InvalidSchemaError):
        validate_against_schema(1, {"if": {}})
