"""Client and status monitors for the Temporal workflow bridge."""

from .client import WorkflowApiClient
from .errors import WorkflowApiError, WorkflowNotFoundError
from .monitor import (
    CallWorkflowMonitor,
    CampaignWorkflowMonitor,
    IntegrationSyncMonitor,
    WorkflowListMonitor,
    WorkflowStatusMonitor,
)

__all__ = [
    "CallWorkflowMonitor",
    "CampaignWorkflowMonitor",
    "IntegrationSyncMonitor",
    "WorkflowApiClient",
    "WorkflowApiError",
    "WorkflowListMonitor",
    "WorkflowNotFoundError",
    "WorkflowStatusMonitor",
]
