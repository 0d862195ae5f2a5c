"""
FastAPI application entrypoint.

Run locally:  uvicorn schemacheck.main:app --reload
"""

import logging

from fastapi import FastAPI

from schemacheck.api.routes import router
from schemacheck.config import settings

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s")

app = FastAPI(
    title="Schema Check API",
    description=(
        "Validates JSON values against JSON-Schema-shaped constraint trees "
        "and reports the first failing path with its reason."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")
