"""
Booky - Request ID Middleware
=============================

What:  Assigns a short ID to each incoming request and echoes it back in
       the X-Request-ID response header.
How:   Reuses a client-supplied X-Request-ID or generates one, stores it in
       a ContextVar for loggers and error handlers, and on request.state
       for route handlers.

Unexpected exceptions escaping the routes are turned into a 500 here, so
that response still carries the request ID in its header and body.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Use the client's X-Request-ID header if present
        2. Otherwise generate the first 8 characters of a UUID4
        3. Store in ContextVar and request.state
        4. Add to response headers, including on unexpected 500s
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as exc:
            # Stack trace is logged server-side only
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
            response = JSONResponse(
                status_code=500,
                content={
                    "error": "internal_server_error",
                    "message": "An unexpected error occurred.",
                    "request_id": rid,
                },
            )

        response.headers["X-Request-ID"] = rid

        return response
