"""
Service-layer error types.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request; the exception handlers translate them to HTTP responses.
"""

from __future__ import annotations

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for expected business-rule failures."""

    status_code: int = 400

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequestError(ServiceError):
    """The request violates a business rule (unknown catalog id, blank number, ...)."""

    status_code = 400


class NotFoundError(ServiceError):
    """A referenced record does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any) -> None:
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(ServiceError):
    """The record is in a state that does not allow the operation."""

    status_code = 409
