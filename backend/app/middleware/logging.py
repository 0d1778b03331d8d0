"""
NoteSync Backend - Request Logging Middleware
===============================================

What:  One access log line per HTTP request.
How:   Measures the time spent in the rest of the stack and logs method,
       path, status, duration, request ID, user ID and client IP.
Who:   Applied to every request except /health probes.

Log level follows the status class:
    5xx → ERROR, 4xx → WARNING, otherwise INFO

Request bodies and Authorization headers are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("notesync.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs structured information about each HTTP request and response."""

    SKIPPED_PATHS = {"/health", "/health/ready"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        # Set by the require_user dependency on authenticated routes
        user = getattr(request.state, "user", None)
        user_id = user.id if user is not None else "-"

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
                "client_ip": client_ip,
            },
        )

        return response
