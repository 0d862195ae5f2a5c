"""Exceptions raised while checking values against schemas."""

from __future__ import annotations

from typing import Any

from schemacheck.models.value import render_value


class SchemaCheckError(Exception):
    """Base exception for schemacheck errors."""


class InvalidSchemaError(SchemaCheckError):
    """The schema itself is malformed or self-contradictory."""

    def __init__(self, path: str, details: str):
        super().__init__(f"invalid schema at {path}: {details}")
        self.path = path
        self.details = details


class InvalidValueError(SchemaCheckError):
    """A value violated a constraint of an otherwise valid schema."""

    def __init__(self, path: str, value: Any, details: str):
        super().__init__(
            f"{render_value(value)} did not conform to the schema at {path}: {details}"
        )
        self.path = path
        self.value = value
        self.details = details


class SerializationError(SchemaCheckError):
    """An item could not be converted into a JSON value."""

    def __init__(self, cause: Exception):
        super().__init__(f"error serializing item: {cause}")
        self.cause = cause


class ConformanceError(SchemaCheckError):
    """
    Raised by the diagnostic wrappers. The message is the full multi-line
    report; the underlying engine error is kept on ``error``.
    """

    def __init__(self, message: str, error: SchemaCheckError):
        super().__init__(message)
        self.error = error
