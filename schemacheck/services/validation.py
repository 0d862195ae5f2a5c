"""
Validation engine for JSON-Schema-shaped constraint trees.

A structured schema node is checked one keyword group at a time, in a fixed
order, and the first group that fails aborts the node:

    type -> const/enum -> subschemas -> number -> string -> array -> object -> $ref

Sub-evaluations (combinator branches, array elements, object properties)
are independent of each other. Combinators treat a value error in a branch
as "did not match"; a schema error anywhere aborts the whole call.
"""

from __future__ import annotations

import logging
import math
import re
import sys
from typing import Any, Mapping

from schemacheck.errors import InvalidSchemaError, InvalidValueError, SchemaCheckError
from schemacheck.models.schema import (
    ArrayValidation,
    InstanceType,
    NumberValidation,
    ObjectValidation,
    Schema,
    SchemaObject,
    StringValidation,
    SubschemaValidation,
)
from schemacheck.models.value import is_instance_of, is_number, values_equal
from schemacheck.services.loader import load_schema
from schemacheck.services.patterns import compile_pattern

logger = logging.getLogger(__name__)

Definitions = Mapping[str, Schema]

# (reference, id(value)) pairs currently being resolved on the call stack
_ActiveRefs = frozenset[tuple[str, int]]


def validate_against_schema(value: Any, document: Any) -> list[str]:
    """
    Validate a JSON value against a raw JSON schema document.
    Returns a list of error messages (empty list = valid).

    Schema errors are raised, not returned: they point at a broken schema
    rather than bad data.
    """
    root = load_schema(document)
    try:
        validate_schema("$", root.schema, root.definitions, value)
    except InvalidValueError as exc:
        return [str(exc)]
    return []


def check(path: str, schema: Schema, definitions: Definitions, value: Any) -> SchemaCheckError | None:
    """Like ``validate_schema`` but returns the error instead of raising it."""
    try:
        validate_schema(path, schema, definitions, value)
    except (InvalidSchemaError, InvalidValueError) as exc:
        return exc
    return None


def validate_schema(path: str, schema: Schema, definitions: Definitions, value: Any) -> None:
    """
    Check ``value`` against ``schema``.

    Raises ``InvalidSchemaError`` when the schema is malformed and
    ``InvalidValueError`` when the value does not conform. ``path`` is the
    breadcrumb reported for failures at this node, conventionally ``"$"``.
    """
    _validate(path, schema, definitions, value, frozenset())


def _validate(path: str, schema: Schema, definitions: Definitions, value: Any, active: _ActiveRefs) -> None:
    if schema is True:
        return
    if schema is False:
        raise InvalidValueError(path, value, "trying to match against the empty set schema")
    _validate_object(path, schema, definitions, value, active)


def _passes(path: str, schema: Schema, definitions: Definitions, value: Any, active: _ActiveRefs) -> bool:
    try:
        _validate(path, schema, definitions, value, active)
    except InvalidValueError as exc:
        logger.debug("Branch at %s rejected value: %s", path, exc.details)
        return False
    return True


def _validate_object(
    path: str, schema: SchemaObject, definitions: Definitions, value: Any, active: _ActiveRefs
) -> None:
    if schema.instance_type is not None:
        _check_type(path, schema.instance_type, value)
    _check_const_enum(path, schema, value)
    if schema.subschemas is not None:
        _check_subschemas(path, schema.subschemas, definitions, value, active)
    if schema.number is not None:
        _check_number(path, schema.number, value)
    if schema.string is not None:
        _check_string(path, schema.string, value)
    if schema.array is not None:
        _check_array(path, schema.array, definitions, value, active)
    if schema.object is not None:
        _check_object(path, schema.object, definitions, value, active)
    if schema.reference is not None:
        _check_reference(path, schema.reference, definitions, value, active)


# ---------------------------------------------------------------------------
# type / const / enum
# ---------------------------------------------------------------------------


def _check_type(path: str, instance_type: InstanceType | list[InstanceType], value: Any) -> None:
    if isinstance(instance_type, list):
        if not any(is_instance_of(t, value) for t in instance_type):
            names = ", ".join(t.value for t in instance_type)
            raise InvalidValueError(path, value, f"value is not any of [{names}]")
    elif not is_instance_of(instance_type, value):
        raise InvalidValueError(path, value, f"value is not of type {instance_type.value}")


def _check_const_enum(path: str, schema: SchemaObject, value: Any) -> None:
    if schema.has_const and schema.enum_values is not None:
        raise InvalidSchemaError(path, "both `const` and `enum` present")
    if schema.has_const:
        if not values_equal(schema.const_value, value):
            raise InvalidValueError(f"{path}.const", value, "mismatch with expected const value")
    elif schema.enum_values is not None:
        if not any(values_equal(member, value) for member in schema.enum_values):
            raise InvalidValueError(f"{path}.enum", value, "not a valid enumerated value")


# ---------------------------------------------------------------------------
# allOf / anyOf / oneOf / not / if-then-else
# ---------------------------------------------------------------------------


def _check_subschemas(
    path: str, subschemas: SubschemaValidation, definitions: Definitions, value: Any, active: _ActiveRefs
) -> None:
    if subschemas.all_of is not None:
        sub_path = f"{path}.allOf"
        bad_count = sum(
            not _passes(sub_path, sub_schema, definitions, value, active)
            for sub_schema in subschemas.all_of
        )
        if bad_count:
            raise InvalidValueError(
                sub_path,
                value,
                f"value did not validate for {bad_count} of {len(subschemas.all_of)} `allOf` schemas",
            )

    if subschemas.any_of is not None:
        sub_path = f"{path}.anyOf"
        if not any(_passes(sub_path, sub_schema, definitions, value, active) for sub_schema in subschemas.any_of):
            raise InvalidValueError(sub_path, value, "value did not validate for any `anyOf` schemas")

    if subschemas.one_of is not None:
        sub_path = f"{path}.oneOf"
        good_count = sum(
            _passes(sub_path, sub_schema, definitions, value, active)
            for sub_schema in subschemas.one_of
        )
        if good_count != 1:
            raise InvalidValueError(
                sub_path,
                value,
                f"value validated against {good_count} of {len(subschemas.one_of)} "
                "`oneOf` schemas (rather than 1)",
            )

    if subschemas.not_schema is not None:
        sub_path = f"{path}.not"
        if _passes(sub_path, subschemas.not_schema, definitions, value, active):
            raise InvalidValueError(sub_path, value, "value validated `not` schemas (but must not)")

    _check_conditional(path, subschemas, definitions, value, active)


def _check_conditional(
    path: str, subschemas: SubschemaValidation, definitions: Definitions, value: Any, active: _ActiveRefs
) -> None:
    if_schema = subschemas.if_schema
    then_schema = subschemas.then_schema
    else_schema = subschemas.else_schema

    if if_schema is None:
        if then_schema is not None and else_schema is not None:
            raise InvalidSchemaError(path, "cannot have `then` and `else` schemas without an `if` schema")
        if then_schema is not None:
            raise InvalidSchemaError(path, "cannot have a `then` schema without an `if` schema")
        if else_schema is not None:
            raise InvalidSchemaError(path, "cannot have an `else` schema without an `if` schema")
        return

    if then_schema is None and else_schema is None:
        raise InvalidSchemaError(path, "an `if` schema must have a `then` or `else`")

    if _passes(f"{path}.if", if_schema, definitions, value, active):
        if then_schema is not None:
            _validate(f"{path}.then", then_schema, definitions, value, active)
    elif else_schema is not None:
        _validate(f"{path}.else", else_schema, definitions, value, active)


# ---------------------------------------------------------------------------
# number
# ---------------------------------------------------------------------------


def _round_half_away_from_zero(x: float) -> int:
    whole = math.trunc(x)
    if abs(x - whole) >= 0.5:
        whole += 1 if x > 0 else -1
    return whole


def _check_number(path: str, number: NumberValidation, value: Any) -> None:
    if not is_number(value):
        raise InvalidValueError(path, value, "expected a number")
    n = value

    if number.multiple_of is not None:
        try:
            quotient = n / number.multiple_of
        except OverflowError:
            # ints beyond float range
            quotient = math.inf
        # only a positive remainder beyond epsilon fails
        if math.isfinite(quotient) and quotient - _round_half_away_from_zero(quotient) > sys.float_info.epsilon:
            raise InvalidValueError(path, value, f"the value {n} is not a multiple of {number.multiple_of}")

    # maximum/minimum reject the bound itself; the exclusive variants admit it
    if number.maximum is not None and n >= number.maximum:
        raise InvalidValueError(path, value, f"the value {n} >= the maximum {number.maximum}")
    if number.exclusive_maximum is not None and n > number.exclusive_maximum:
        raise InvalidValueError(
            path, value, f"the value {n} > the exclusive maximum {number.exclusive_maximum}"
        )
    if number.minimum is not None and n <= number.minimum:
        raise InvalidValueError(path, value, f"the value {n} <= the minimum {number.minimum}")
    if number.exclusive_minimum is not None and n < number.exclusive_minimum:
        raise InvalidValueError(
            path, value, f"the value {n} < the exclusive minimum {number.exclusive_minimum}"
        )


# ---------------------------------------------------------------------------
# string
# ---------------------------------------------------------------------------


def _check_string(path: str, string: StringValidation, value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidValueError(path, value, "expected a string")

    # lengths are UTF-8 byte counts; lone surrogates count as three bytes
    size = len(value.encode("utf-8", "surrogatepass"))
    if string.max_length is not None and size > string.max_length:
        raise InvalidValueError(path, value, f"The string is longer than {string.max_length} characters")
    if string.min_length is not None and size < string.min_length:
        raise InvalidValueError(path, value, f"The string is shorter than {string.min_length} characters")

    if string.pattern is not None:
        regex = _compile(path, string.pattern)
        if regex.search(value) is None:
            raise InvalidValueError(path, value, f"{value} does not match the pattern {string.pattern}")


def _compile(path: str, pattern: str) -> re.Pattern[str]:
    try:
        return compile_pattern(pattern)
    except re.error as exc:
        raise InvalidSchemaError(path, f"{pattern} is not a valid regex") from exc


# ---------------------------------------------------------------------------
# array
# ---------------------------------------------------------------------------


def _check_array(
    path: str, array: ArrayValidation, definitions: Definitions, value: Any, active: _ActiveRefs
) -> None:
    if not isinstance(value, list):
        raise InvalidValueError(path, value, "expected an array")
    count = len(value)

    if array.max_items is not None and count > array.max_items:
        raise InvalidValueError(path, value, f"{count} items is greater than the maximum of {array.max_items}")
    if array.min_items is not None and count < array.min_items:
        raise InvalidValueError(path, value, f"{count} items is less than the minimum of {array.min_items}")

    if array.unique_items:
        for i in range(count):
            for j in range(i + 1, count):
                if values_equal(value[i], value[j]):
                    raise InvalidValueError(
                        path,
                        value,
                        f"items should be unique, but items at [{i}] and [{j}] are the same",
                    )

    if isinstance(array.items, list):
        for i, (item, item_schema) in enumerate(zip(value, array.items)):
            _validate(f"{path}[{i}]", item_schema, definitions, item, active)
        if array.additional_items is not None:
            for i in range(len(array.items), count):
                _validate(f"{path}[{i}]", array.additional_items, definitions, value[i], active)
    elif array.items is not None:
        for i, item in enumerate(value):
            _validate(f"{path}[{i}]", array.items, definitions, item, active)

    if array.contains is not None:
        if not any(
            _passes(f"{path}[{i}]", array.contains, definitions, item, active)
            for i, item in enumerate(value)
        ):
            raise InvalidValueError(f"{path}.contains", value, "array does not contain the required item")


# ---------------------------------------------------------------------------
# object
# ---------------------------------------------------------------------------


def _check_object(
    path: str, obj: ObjectValidation, definitions: Definitions, value: Any, active: _ActiveRefs
) -> None:
    if not isinstance(value, dict):
        raise InvalidValueError(path, value, "expected an object")
    count = len(value)

    if obj.max_properties is not None and count > obj.max_properties:
        raise InvalidValueError(
            path, value, f"{count} properties is greater than the maximum of {obj.max_properties}"
        )
    if obj.min_properties is not None and count < obj.min_properties:
        raise InvalidValueError(
            path, value, f"{count} properties is less than the minimum of {obj.min_properties}"
        )

    for prop in sorted(obj.required):
        if prop not in value:
            raise InvalidValueError(path, value, f"the property {prop} is required but absent")

    patterns = [
        (_compile(path, pattern), pattern_schema)
        for pattern, pattern_schema in obj.pattern_properties.items()
    ]

    for prop_name, prop_value in value.items():
        prop_path = f"{path}.{prop_name}"
        seen = False

        if prop_name in obj.properties:
            _validate(prop_path, obj.properties[prop_name], definitions, prop_value, active)
            seen = True

        for regex, pattern_schema in patterns:
            if regex.search(prop_name) is not None:
                _validate(prop_path, pattern_schema, definitions, prop_value, active)
                seen = True

        if not seen and obj.additional_properties is not None:
            _validate(prop_path, obj.additional_properties, definitions, prop_value, active)

        if obj.property_names is not None:
            _validate(prop_path, obj.property_names, definitions, prop_name, active)


# ---------------------------------------------------------------------------
# $ref
# ---------------------------------------------------------------------------


def _check_reference(
    path: str, reference: str, definitions: Definitions, value: Any, active: _ActiveRefs
) -> None:
    _, slash, name = reference.rpartition("/")
    if not slash or name not in definitions:
        raise InvalidSchemaError(path, f"invalid reference: {reference}")

    # Same reference, same value object, already on the stack: the walk would
    # repeat itself forever.
    frame = (reference, id(value))
    if frame in active:
        raise InvalidSchemaError(path, f"reference cycle through {reference}")

    logger.debug("Resolving %s at %s", reference, path)
    _validate(reference, definitions[name], definitions, value, active | {frame})
