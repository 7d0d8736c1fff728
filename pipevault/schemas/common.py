"""Shared Pydantic schema base with camelCase aliases, plus the error envelope."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """All API schemas inherit from this: camelCase on the wire, snake_case in Python."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class ErrorDetail(CamelModel):
    code: str
    message: str
    entity_type: str | None = None
    entity_id: str | None = None
    retryable: bool = False
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """`{ error: {...} }` body rendered by the exception handlers."""

    error: ErrorDetail


def error_responses(*status_codes: int) -> dict[int, dict[str, Any]]:
    """OpenAPI `responses=` entry documenting the error envelope for each code."""
    return {code: {"model": ErrorResponse} for code in status_codes}


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
    database: str = "ok"
