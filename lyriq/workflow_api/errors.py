"""Error types specific to the workflow bridge API layer.

Purpose:
- Provide typed exceptions thrown by `WorkflowApiClient`.
- Expose HTTP-oriented context (status code, error body) for diagnosis.

Usage:
- Catch `WorkflowApiError` for general failures and inspect `status_code` or
  `details`. A `status_code` of None means the bridge was unreachable.
- Catch `WorkflowNotFoundError` when a workflow id is unknown to the bridge.
"""

from __future__ import annotations

from typing import Any, Optional


class WorkflowApiError(Exception):
    """Base error for workflow bridge failures.

    Args:
        message: Human-readable error description, taken from the bridge's
            ``message`` field when it sends one.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload from the server (parsed JSON or raw text).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class WorkflowNotFoundError(WorkflowApiError):
    """Raised when the bridge answers 404 for a workflow operation."""
