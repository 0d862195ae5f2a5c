"""
FastAPI routes – validation as a service.

Every request gets a structured answer: malformed schemas and
non-conforming values are both reported in the response body.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from schemacheck.config import settings
from schemacheck.errors import InvalidSchemaError, InvalidValueError
from schemacheck.schemas.api import (
    HealthResponse,
    ValidationIssue,
    ValidationRequest,
    ValidationResponse,
)
from schemacheck.services.diagnostics import render_diagnostic
from schemacheck.services.loader import load_schema
from schemacheck.services.validation import validate_schema

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check():
    """Basic health endpoint."""
    return HealthResponse(status="healthy", environment=settings.ENVIRONMENT)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@router.post("/validate", response_model=ValidationResponse)
def validate_value(request: ValidationRequest):
    """Check a value against a schema document and report the first failure."""
    try:
        root = load_schema(request.schema_document, definitions=request.definitions)
        validate_schema("$", root.schema, root.definitions, request.value)
    except InvalidSchemaError as exc:
        error = exc
        logger.info("Rejected schema at %s: %s", exc.path, exc.details)
        issue = ValidationIssue(
            kind="invalid_schema", path=exc.path, details=exc.details, message=str(exc)
        )
    except InvalidValueError as exc:
        error = exc
        logger.info("Value failed at %s: %s", exc.path, exc.details)
        issue = ValidationIssue(
            kind="invalid_value",
            path=exc.path,
            details=exc.details,
            value=exc.value,
            message=str(exc),
        )
    else:
        logger.info("Value conforms")
        return ValidationResponse(valid=True)

    diagnostic = None
    if request.include_diagnostic:
        diagnostic = render_diagnostic(error, request.schema_document, request.value)
    return ValidationResponse(valid=False, error=issue, diagnostic=diagnostic)
