"""
FastAPI middleware for request tracing and log correlation.
"""

from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from loft_reservations.config import SLOW_REQUEST_THRESHOLD_MS

logger = structlog.get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Give every request a unique ID and attach it to all log lines.

    The ID is:
    1. Stored in request.state.request_id for route handlers
    2. Bound into structlog's context variables, so every log event emitted
       while handling the request carries request_id
    3. Returned to the client as the X-Request-ID response header

    Requests slower than SLOW_REQUEST_THRESHOLD_MS are logged with their
    method, path, status and duration.

    Example:
        >>> app.add_middleware(RequestIDMiddleware)
        >>> # Response headers will include:
        >>> # X-Request-ID: 550e8400-e29b-41d4-a716-446655440000
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms > SLOW_REQUEST_THRESHOLD_MS:
                logger.info(
                    "slow_request",
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=round(duration_ms, 2),
                )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Request-ID"] = request_id
        return response
