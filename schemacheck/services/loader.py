"""
Schema document loading.

Turns a raw JSON Schema document (a dict or boolean, as parsed from JSON or
produced by a schema generator) into a ``RootSchema``: the typed root node
plus the flat definitions table collected from ``definitions`` and ``$defs``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import TypeAdapter, ValidationError

from schemacheck.config import settings
from schemacheck.errors import InvalidSchemaError
from schemacheck.models.schema import DOCUMENT_CONTEXT, RootSchema, Schema

logger = logging.getLogger(__name__)

_schema_adapter: TypeAdapter[Schema] = TypeAdapter(Schema)

DEFINITION_KEYWORDS = ("definitions", "$defs")


def check_meta_schema(document: Any) -> None:
    """Check a document against the meta-schema of its declared draft (draft 7 if none)."""
    validator_cls = validator_for(document, default=Draft7Validator)
    try:
        # pattern syntax is ECMA-262; compiling it is left to the engine
        validator_cls.check_schema(document, format_checker=None)
    except SchemaError as exc:
        path = "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in exc.absolute_path)
        raise InvalidSchemaError("$" + path, exc.message) from exc


def parse_schema(document: Any, path: str = "$") -> Schema:
    """Parse one schema node; pydantic errors become ``InvalidSchemaError``."""
    try:
        return _schema_adapter.validate_python(document, context=DOCUMENT_CONTEXT)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidSchemaError(path, f"{location}: {first['msg']}") from exc


def load_schema(
    document: Any,
    definitions: Mapping[str, Any] | None = None,
    check_meta: bool | None = None,
) -> RootSchema:
    """
    Load a schema document.

    ``definitions`` are extra named schemas merged over the ones the document
    declares itself.
    """
    if check_meta is None:
        check_meta = settings.CHECK_META_SCHEMA
    if check_meta:
        check_meta_schema(document)

    raw_definitions: dict[str, Any] = {}
    if isinstance(document, dict):
        for keyword in DEFINITION_KEYWORDS:
            declared = document.get(keyword, {})
            if not isinstance(declared, dict):
                raise InvalidSchemaError("$", f"`{keyword}` must be an object")
            raw_definitions.update(declared)
    raw_definitions.update(definitions or {})

    parsed = {
        name: parse_schema(definition, f"#/definitions/{name}")
        for name, definition in raw_definitions.items()
    }
    root = RootSchema(schema=parse_schema(document), definitions=parsed)
    logger.debug("Loaded schema with %d definitions", len(parsed))
    return root
