"""
Logfire Middleware for FastAPI.

Times every request, reports it through ``log_api_request`` and attaches the
processing time to the response. Requests slower than
``SLOW_REQUEST_THRESHOLD_MS`` are logged as warnings. The live call feed and
workflow status streams are long-lived by nature and are never reported as
slow.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lyriq.core.logging_config import get_logger
from lyriq.core.monitoring import log_api_request

logger = get_logger(__name__)

SLOW_REQUEST_THRESHOLD_MS = 1000.0

PROCESS_TIME_HEADER = "X-Process-Time"


def is_stream(request: Request) -> bool:
    return request.url.path.endswith("/stream") or request.headers.get("accept", "").startswith("text/event-stream")


class LogfireMiddleware(BaseHTTPMiddleware):
    """Middleware for tracing API requests with Logfire."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process the request and log metrics.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/handler

        Returns:
            The HTTP response
        """
        started = time.perf_counter()
        method = request.method
        path = request.url.path

        request.state.start_time = started
        request.state.method = method
        request.state.path = path

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"API request failed: {method} {path}",
                exc_info=True,
                extra={"method": method, "path": path, "duration_ms": duration_ms, "error": str(e)},
            )
            log_api_request(method=method, path=path, status_code=500, duration_ms=duration_ms)
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        log_api_request(method=method, path=path, status_code=response.status_code, duration_ms=duration_ms)
        response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.2f}"

        if duration_ms > SLOW_REQUEST_THRESHOLD_MS and not is_stream(request):
            logger.warning(
                f"Slow API request: {method} {path} took {duration_ms:.2f}ms",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "status_code": response.status_code,
                },
            )
        return response
