"""Request logging middleware — one log line per state-changing request.

Business audit entries are written by the services inside their own
transactions; this middleware only logs.
"""


import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("pipevault.requests")

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Logs every write with the acting admin, status code and duration.

    Reads are logged at DEBUG only.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                level,
                "%s %s -> %d (%dms) admin=%s client=%s",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                request.headers.get("x-admin-id", "-"),
                request.client.host if request.client else "-",
            )
        else:
            logger.debug(
                "%s %s -> %d (%dms)",
                request.method, request.url.path, response.status_code, duration_ms,
            )
        return response
