"""Request-scoped middleware: correlation ids and request logging."""

from __future__ import annotations

import secrets
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from donation_kernel.logging_config import LogContext, get_logger

logger = get_logger("api.requests")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Bind a correlation id to every request and echo it in the response.

    The id comes from the ``X-Request-ID`` header when the caller sends one.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(8)
        request.state.request_id = request_id

        started = time.perf_counter()
        with LogContext.bind(correlation_id=request_id, request_path=request.url.path):
            response = await call_next(request)
            logger.info(
                "request_completed",
                extra={
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
