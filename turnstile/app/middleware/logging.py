"""
Logging Middleware

Binds a request id to every log line of a request and records one
"started" and one "completed" line per request.

The id comes from the caller's ``X-Request-ID`` header when present, or is
generated. Handlers read it from ``request.state.request_id``: the gateway
sends it upstream as ``X-Gateway-Request-ID`` and stores it on the audit
entry. It is echoed back on the response.

Health probes are logged at debug level so they do not drown the access log.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import clear_log_context, log_context, logger
from app.core.utils import generate_short_id

REQUEST_ID_HEADER = "X-Request-ID"

PLANE_PREFIXES = (
    ("/gateway/", "gateway"),
    ("/control-plane/", "control_plane"),
    ("/health", "health"),
)


def request_plane(path: str) -> str:
    """Which part of the service a path belongs to."""
    for prefix, plane in PLANE_PREFIXES:
        if path.startswith(prefix):
            return plane
    return "other"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Per-request logging context and access log."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_short_id("req")
        request.state.request_id = request_id

        plane = request_plane(request.url.path)
        log_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            plane=plane,
        )
        log = logger.debug if plane == "health" else logger.info

        log("Request started")
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            log(
                "Request completed",
                status_code=response.status_code,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as e:
            logger.error(
                "Request failed",
                error_type=type(e).__name__,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )
            raise
        finally:
            clear_log_context()
