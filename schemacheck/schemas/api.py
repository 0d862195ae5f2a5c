"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationRequest(BaseModel):
    """A schema document, optional extra definitions and the value to check."""
    model_config = ConfigDict(populate_by_name=True)

    schema_document: bool | dict[str, Any] = Field(..., alias="schema")
    definitions: dict[str, bool | dict[str, Any]] = Field(default_factory=dict)
    value: JsonValue
    include_diagnostic: bool = False


class ValidationIssue(BaseModel):
    kind: Literal["invalid_schema", "invalid_value"]
    path: str
    details: str
    value: JsonValue = None
    message: str


class ValidationResponse(BaseModel):
    valid: bool
    error: ValidationIssue | None = None
    diagnostic: str | None = None


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
