"""
NoteSync Backend - Request ID Middleware
==========================================

What:  Assigns a short ID to each incoming request and returns it in the
       X-Request-ID response header.
How:   Uses the client's X-Request-ID when present, otherwise a fresh UUID
       prefix; stores it in a ContextVar and in request.state.
Who:   Read by the access log middleware and the exception handlers, which
       put it in every error body.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that tags each request with a correlation ID."""

    HEADER = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(self.HEADER) or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[self.HEADER] = rid
        return response
