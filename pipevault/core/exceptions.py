"""Application-level exceptions and FastAPI exception handlers.

Every error carries a machine-readable ``code`` plus the kind and id of the
offending entity so callers can render a specific message.  Only
:class:`DataAccessError` is retryable; every other error is a terminal
outcome for the attempt that raised it.
"""


from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pipevault.schemas.common import ErrorDetail, ErrorResponse

class AppException(Exception):
    """Base application exception."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        entity_type: str | None = None,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.details = details or {}
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(
            msg, status_code=404, code="NOT_FOUND", entity_type=entity, entity_id=entity_id
        )

class AuthorizationError(AppException):
    """The acting principal is not a current admin."""

    def __init__(self, principal_id: str | None, message: str = "Admin privileges required"):
        super().__init__(
            message,
            status_code=403,
            code="FORBIDDEN",
            entity_type="AdminUser",
            entity_id=principal_id,
        )

class StateConflictError(AppException):
    """The entity is no longer in the status the operation expects."""

    def __init__(
        self,
        entity: str,
        entity_id: str,
        current_status: str | None,
        expected_status: str,
        reference: str | None = None,
    ):
        label = reference or entity_id
        msg = (
            f"{entity} {label} is not {expected_status} "
            f"(current status: {current_status or 'unknown'})"
        )
        super().__init__(
            msg,
            status_code=409,
            code="STATE_CONFLICT",
            entity_type=entity,
            entity_id=entity_id,
            details={"currentStatus": current_status, "expectedStatus": expected_status},
        )

class CapacityError(AppException):
    """A rack would exceed its capacity.

    Approvals report the joints still *available*; an occupancy overwrite
    passes the rack's *capacity* instead.
    """

    def __init__(
        self,
        rack_id: str,
        requested: int,
        available: int | None = None,
        rack_name: str | None = None,
        *,
        capacity: int | None = None,
    ):
        label = rack_name or rack_id
        if capacity is not None:
            msg = f"Rack {label} cannot hold {requested} joints (exceeds capacity {capacity})"
            details = {"requested": requested, "capacity": capacity}
        else:
            msg = (
                f"Insufficient capacity on rack {label}: "
                f"{requested} joints requested, {available} available"
            )
            details = {"requested": requested, "available": available}
        super().__init__(
            msg,
            status_code=409,
            code="CAPACITY_EXCEEDED",
            entity_type="Rack",
            entity_id=rack_id,
            details=details,
        )

class ValidationError(AppException):
    def __init__(self, message: str, entity_type: str | None = None, entity_id: str | None = None):
        super().__init__(
            message,
            status_code=422,
            code="VALIDATION_ERROR",
            entity_type=entity_type,
            entity_id=entity_id,
        )

class DataAccessError(AppException):
    """The store was unreachable, timed out, or rejected the write. Safe to retry."""

    retryable = True

    def __init__(self, message: str = "The data store is unavailable", operation: str | None = None):
        super().__init__(
            message,
            status_code=503,
            code="DATA_ACCESS_ERROR",
            details={"operation": operation} if operation else None,
        )

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, exc: AppException | None = None) -> dict:
    detail = ErrorDetail(code=code, message=message)
    if exc is not None:
        detail.entity_type = exc.entity_type
        detail.entity_id = exc.entity_id
        detail.retryable = exc.retryable
        detail.details = exc.details or None
    return ErrorResponse(error=detail).model_dump(by_alias=True, exclude_none=True)

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
