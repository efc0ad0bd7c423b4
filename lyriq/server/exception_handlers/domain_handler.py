"""
Domain Exception Handler for FastAPI Application.

Translates the typed errors raised by services and upstream clients into
JSON responses with a meaningful status code. Unknown upstream failures are
reported as 502 Bad Gateway and missing provider credentials as 503.
"""

from typing import Any, Dict, Tuple, Type

from fastapi import Request, status
from fastapi.responses import JSONResponse

from lyriq.core.logging_config import get_logger
from lyriq.core.monitoring import log_error
from lyriq.llm import LLMError, LLMNotConfiguredError
from lyriq.server.services.errors import ServiceError
from lyriq.voice import TelephonyError, TelephonyNotConfiguredError, VapiApiError, VapiNotConfiguredError
from lyriq.workflow_api import WorkflowApiError, WorkflowNotFoundError

logger = get_logger(__name__)

# Most specific classes first
DOMAIN_ERROR_STATUS: Tuple[Tuple[Type[Exception], int], ...] = (
    (WorkflowNotFoundError, status.HTTP_404_NOT_FOUND),
    (WorkflowApiError, status.HTTP_502_BAD_GATEWAY),
    (VapiNotConfiguredError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (VapiApiError, status.HTTP_502_BAD_GATEWAY),
    (TelephonyNotConfiguredError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (TelephonyError, status.HTTP_502_BAD_GATEWAY),
    (LLMNotConfiguredError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LLMError, status.HTTP_502_BAD_GATEWAY),
)

HANDLED_ERRORS: Tuple[Type[Exception], ...] = (ServiceError,) + tuple(cls for cls, _ in DOMAIN_ERROR_STATUS)


def status_for(exc: Exception) -> int:
    """HTTP status code for a service or upstream error."""
    if isinstance(exc, ServiceError):
        return exc.status_code
    # A VAPI 404 means the requested call does not exist
    if isinstance(exc, VapiApiError) and getattr(exc, "status_code", None) == status.HTTP_404_NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    for error_type, status_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Convert an expected error into a JSON response.

    Business-rule failures are logged at INFO, upstream failures at WARNING
    together with the upstream status code.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with ``detail`` and ``error_type``, plus ``details`` when the
        error carries them
    """
    status_code = status_for(exc)
    message = getattr(exc, "message", None) or str(exc)
    content: Dict[str, Any] = {"detail": message, "error_type": type(exc).__name__}
    details = getattr(exc, "details", None)

    if isinstance(exc, ServiceError):
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {message}")
        if details is not None:
            content["details"] = details
    else:
        upstream_status = getattr(exc, "status_code", None)
        logger.warning(
            f"Upstream failure in {request.method} {request.url.path}: {message}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "error_type": type(exc).__name__,
                "upstream_status": upstream_status,
            },
        )
        log_error(type(exc).__name__, message, {"path": request.url.path, "upstream_status": upstream_status})
        if upstream_status is not None:
            content["upstream_status"] = upstream_status

    return JSONResponse(status_code=status_code, content=content)
