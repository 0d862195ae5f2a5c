"""Human-readable failure reports."""

from __future__ import annotations

import json
from typing import Any

from schemacheck.config import settings
from schemacheck.errors import SchemaCheckError


def pretty(document: Any, indent: int | None = None) -> str:
    if indent is None:
        indent = settings.DIAGNOSTIC_INDENT
    return json.dumps(document, indent=indent, ensure_ascii=False, default=str)


def render_diagnostic(
    error: SchemaCheckError,
    schema_document: Any,
    value: Any,
    indent: int | None = None,
) -> str:
    """Combine the error, the pretty-printed schema and the pretty-printed value."""
    return (
        f"error: {error}\n"
        f"schema: {pretty(schema_document, indent)}\n"
        f"value: {pretty(value, indent)}"
    )
