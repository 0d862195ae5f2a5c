"""
Checking typed items against the schema of their own type.

Pydantic provides both sides: the JSON schema derived from a type and the
JSON-mode serialization of an instance. Validating one against the other
catches drift between the declared shape and what actually gets emitted
(custom serializers, aliases, computed fields and so on).

    validate_item(Order(id=1))           # raises on mismatch
    validate_with_output(Order(id=1))    # raises ConformanceError with a full report
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import JsonValue, TypeAdapter
from pydantic_core import PydanticSerializationError

from schemacheck.errors import ConformanceError, InvalidSchemaError, InvalidValueError, SerializationError
from schemacheck.models.schema import RootSchema
from schemacheck.services.diagnostics import render_diagnostic
from schemacheck.services.loader import load_schema
from schemacheck.services.validation import validate_schema

logger = logging.getLogger(__name__)


def schema_document_for(type_: Any) -> dict[str, Any]:
    """JSON schema describing how instances of ``type_`` serialize."""
    return TypeAdapter(type_).json_schema(mode="serialization")


def schema_for(type_: Any) -> RootSchema:
    return load_schema(schema_document_for(type_))


def to_value(item: Any, type_: Any = None) -> JsonValue:
    """Serialize ``item`` to a JSON value, as ``type_`` (default: its own type) would."""
    adapter = TypeAdapter(type_ if type_ is not None else type(item))
    try:
        return adapter.dump_python(item, mode="json", by_alias=True)
    except PydanticSerializationError as exc:
        raise SerializationError(exc) from exc


def validate_item(item: Any, type_: Any = None) -> None:
    """
    Confirm that an item matches its schema.

    Raises ``SerializationError`` if the item cannot be serialized,
    ``InvalidSchemaError`` if the generated schema is unusable and
    ``InvalidValueError`` if the serialization does not conform.
    """
    type_ = type_ if type_ is not None else type(item)
    value = to_value(item, type_)
    root = schema_for(type_)
    logger.debug("Validating %s against its generated schema", getattr(type_, "__name__", type_))
    validate_schema("$", root.schema, root.definitions, value)


def validate_with_output(item: Any, type_: Any = None) -> None:
    """
    Like ``validate_item``, but a mismatch is raised as ``ConformanceError``
    carrying the error, the schema and the serialized value.
    Serialization errors are raised unchanged.
    """
    type_ = type_ if type_ is not None else type(item)
    try:
        validate_item(item, type_)
    except (InvalidSchemaError, InvalidValueError) as exc:
        message = render_diagnostic(exc, schema_document_for(type_), to_value(item, type_))
        raise ConformanceError(message, exc) from exc
