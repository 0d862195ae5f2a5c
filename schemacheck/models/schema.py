"""
Pydantic models for JSON-Schema-shaped constraint trees.

A schema is either a boolean literal or a ``SchemaObject``. The object keeps
its keywords in closed groups (subschemas, number, string, array, object) so
the engine can destructure a node in one pass. Raw documents use the JSON
keyword spelling; ``SchemaObject.model_validate`` folds the flat keywords of
a document into their groups. Validating with ``DOCUMENT_CONTEXT`` makes
keys that merely match a Python field name ignored like any other unknown key.

    SchemaObject.model_validate({"type": "string", "maxLength": 3})
    SchemaObject(string=StringValidation(max_length=3))   # equivalent
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    NonNegativeInt,
    StrictBool,
    StrictFloat,
    StrictInt,
    ValidationInfo,
    field_validator,
    model_validator,
)

Number = Union[StrictInt, StrictFloat]

# Validation context for raw JSON documents: only keyword spellings are read.
DOCUMENT_CONTEXT = {"document": True}


class InstanceType(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NUMBER = "number"
    STRING = "string"
    INTEGER = "integer"


class _KeywordGroup(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class SubschemaValidation(_KeywordGroup):
    all_of: list[Schema] | None = Field(None, alias="allOf")
    any_of: list[Schema] | None = Field(None, alias="anyOf")
    one_of: list[Schema] | None = Field(None, alias="oneOf")
    not_schema: Schema | None = Field(None, alias="not")
    if_schema: Schema | None = Field(None, alias="if")
    then_schema: Schema | None = Field(None, alias="then")
    else_schema: Schema | None = Field(None, alias="else")


class NumberValidation(_KeywordGroup):
    multiple_of: Number | None = Field(None, alias="multipleOf")
    maximum: Number | None = None
    exclusive_maximum: Number | None = Field(None, alias="exclusiveMaximum")
    minimum: Number | None = None
    exclusive_minimum: Number | None = Field(None, alias="exclusiveMinimum")

    @field_validator("multiple_of")
    @classmethod
    def _positive_divisor(cls, value: int | float | None) -> int | float | None:
        if value is not None and value <= 0:
            raise ValueError("multipleOf must be greater than 0")
        return value


class StringValidation(_KeywordGroup):
    max_length: NonNegativeInt | None = Field(None, alias="maxLength")
    min_length: NonNegativeInt | None = Field(None, alias="minLength")
    pattern: str | None = None


class ArrayValidation(_KeywordGroup):
    items: Schema | list[Schema] | None = None
    additional_items: Schema | None = Field(None, alias="additionalItems")
    max_items: NonNegativeInt | None = Field(None, alias="maxItems")
    min_items: NonNegativeInt | None = Field(None, alias="minItems")
    unique_items: StrictBool | None = Field(None, alias="uniqueItems")
    contains: Schema | None = None


class ObjectValidation(_KeywordGroup):
    max_properties: NonNegativeInt | None = Field(None, alias="maxProperties")
    min_properties: NonNegativeInt | None = Field(None, alias="minProperties")
    required: frozenset[str] = frozenset()
    properties: dict[str, Schema] = Field(default_factory=dict)
    pattern_properties: dict[str, Schema] = Field(default_factory=dict, alias="patternProperties")
    additional_properties: Schema | None = Field(None, alias="additionalProperties")
    property_names: Schema | None = Field(None, alias="propertyNames")


# Group name -> the document keywords folded into it.
KEYWORD_GROUPS: dict[str, tuple[str, ...]] = {
    "subschemas": ("allOf", "anyOf", "oneOf", "not", "if", "then", "else"),
    "number": ("multipleOf", "maximum", "exclusiveMaximum", "minimum", "exclusiveMinimum"),
    "string": ("maxLength", "minLength", "pattern"),
    "array": ("items", "additionalItems", "maxItems", "minItems", "uniqueItems", "contains"),
    "object": (
        "maxProperties",
        "minProperties",
        "required",
        "properties",
        "patternProperties",
        "additionalProperties",
        "propertyNames",
    ),
}


class SchemaObject(BaseModel):
    """A structured schema node; every group is optional."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    instance_type: InstanceType | list[InstanceType] | None = Field(None, alias="type")
    const_value: JsonValue = Field(None, alias="const")
    enum_values: list[JsonValue] | None = Field(None, alias="enum")
    subschemas: SubschemaValidation | None = None
    number: NumberValidation | None = None
    string: StringValidation | None = None
    array: ArrayValidation | None = None
    object: ObjectValidation | None = None
    reference: str | None = Field(None, alias="$ref")

    @model_validator(mode="before")
    @classmethod
    def _fold_keywords(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        # field names such as "string" or "reference" are not keywords
        if info.context and info.context.get("document"):
            for name in cls.model_fields:
                data.pop(name, None)

        # 2020-12 tuple form: prefixItems is the per-index list and a sibling
        # items schema covers the trailing elements.
        if "prefixItems" in data:
            if "items" in data:
                data["additionalItems"] = data.pop("items")
            data["items"] = data.pop("prefixItems")

        for group, keywords in KEYWORD_GROUPS.items():
            found = {keyword: data.pop(keyword) for keyword in keywords if keyword in data}
            if found:
                data[group] = found
        return data

    @property
    def has_const(self) -> bool:
        """``const`` was given, possibly as null."""
        return "const_value" in self.model_fields_set


Schema = Union[StrictBool, SchemaObject]

for _model in (
    SubschemaValidation,
    ArrayValidation,
    ObjectValidation,
    SchemaObject,
):
    _model.model_rebuild()


@dataclass(frozen=True)
class RootSchema:
    """A root schema together with its flat definitions table."""

    schema: Schema
    definitions: Mapping[str, Schema] = field(default_factory=dict)
