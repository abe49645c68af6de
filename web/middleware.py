"""
Request observability for the dashboard API.

Each request runs inside its own correlation context, so report, insight
and store logs emitted while serving it share one ID. The ID is taken
from the caller's X-Request-ID when present and echoed back.
"""
import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from atelier.observability import get_logger, correlation_context, metrics

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by Docker/load balancers; counted but not logged
QUIET_PATHS = frozenset({"/api/health", "/health"})


def _access_level(status_code: Optional[int]) -> int:
    if status_code is None or status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One access log line and one metrics sample per request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with correlation_context(request.headers.get(REQUEST_ID_HEADER)) as correlation_id:
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                self._record(request, started, status_code=None, error=e)
                raise

            duration_ms = self._record(request, started, status_code=response.status_code)
            response.headers[REQUEST_ID_HEADER] = correlation_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            return response

    @staticmethod
    def _record(
        request: Request,
        started: float,
        status_code: Optional[int],
        error: Optional[Exception] = None,
    ) -> float:
        duration_ms = (time.perf_counter() - started) * 1000
        endpoint = f"{request.method} {request.url.path}"

        metrics.record_request(endpoint)
        metrics.record_timing(endpoint, duration_ms)
        if error is not None:
            metrics.record_error(type(error).__name__)
        elif status_code >= 400:
            metrics.record_error(f"HTTP_{status_code}")

        if request.url.path not in QUIET_PATHS:
            extra = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else "unknown",
            }
            if error is not None:
                extra["error"] = str(error)
            logger.log(_access_level(status_code), f"{endpoint} -> {status_code or 'failed'}", extra=extra)

        return duration_ms
