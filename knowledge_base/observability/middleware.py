"""
HTTP observability middleware.

CorrelationMiddleware binds a correlation ID to the request context and
echoes it back; RequestLoggingMiddleware records one line per request with
status and latency, and adds the latency as a response header.

Dependencies: fastapi, starlette, knowledge_base.observability.correlation
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from knowledge_base.observability.correlation import correlation_scope

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
PROCESS_TIME_HEADER = "X-Process-Time-Ms"

# Probed by load balancers every few seconds
QUIET_PATH_SUFFIXES = ("/health", "/health/db")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with status code and latency."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        path = request.url.path

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed",
                extra={
                    "method": method,
                    "path": path,
                    "process_time_ms": _elapsed_ms(started),
                    "error_type": type(e).__name__,
                },
            )
            raise

        elapsed = _elapsed_ms(started)
        response.headers[PROCESS_TIME_HEADER] = str(elapsed)
        level = logging.DEBUG if path.endswith(QUIET_PATH_SUFFIXES) else logging.INFO
        logger.log(
            level,
            "%s %s - %s",
            method,
            path,
            response.status_code,
            extra={"method": method, "path": path, "status_code": response.status_code, "process_time_ms": elapsed},
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Bind the caller's correlation ID (or a new one) for the request's lifetime."""

    async def dispatch(self, request: Request, call_next):
        with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            response: Response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
