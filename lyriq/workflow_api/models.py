"""
Wire models of the workflow bridge API.

The bridge speaks camelCase JSON. Every model accepts both the camelCase
alias and the snake_case field name, and serializes with aliases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CallWorkflowStatus = Literal["ringing", "ai_handling", "human_handoff_pending", "human_handling", "completed", "failed"]
CampaignWorkflowStatus = Literal["running", "paused", "completed", "cancelled"]
SyncWorkflowStatus = Literal["running", "paused", "error"]
ExecutionStatus = Literal["RUNNING", "COMPLETED", "FAILED", "CANCELLED", "TERMINATED", "TIMED_OUT"]
SyncIntegrationType = Literal["salesforce", "hubspot", "zendesk", "zoho", "pipedrive", "whatsapp"]


class BridgeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------


class CallHandlingInput(BridgeModel):
    call_id: str
    call_sid: str
    customer_number: str
    direction: Literal["inbound", "outbound"]
    agent_id: Optional[str] = None
    workflow_config_id: Optional[str] = None


class LeadProcessingInput(BridgeModel):
    campaign_id: str
    company_id: str
    batch_size: int = 10
    call_window_start: str = Field(default="09:00", description="HH:MM local time")
    call_window_end: str = Field(default="17:00", description="HH:MM local time")
    max_concurrent_calls: int = 5
    ai_agent_id: str


class IntegrationSyncConfig(BridgeModel):
    id: Optional[str] = None
    type: SyncIntegrationType
    credentials: Dict[str, Any] = Field(default_factory=dict)
    sync_direction: Literal["inbound", "outbound", "bidirectional"] = "bidirectional"
    sync_entities: List[str] = Field(default_factory=list)


class IntegrationSyncInput(BridgeModel):
    company_id: str
    integrations: List[IntegrationSyncConfig]
    sync_interval_minutes: int = 15


# ---------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------


class WorkflowStartResult(BridgeModel):
    workflow_id: str
    run_id: Optional[str] = None


class HealthStatus(BridgeModel):
    status: str
    timestamp: Optional[str] = None


class CallState(BridgeModel):
    status: CallWorkflowStatus
    current_handler: Optional[Literal["ai", "human"]] = None
    transcript_count: int = 0
    escalation_reason: Optional[str] = None
    started_at: Optional[datetime] = None
    handoff_requested_at: Optional[datetime] = None
    handoff_completed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class CampaignState(BridgeModel):
    status: CampaignWorkflowStatus
    total_leads: int = 0
    processed_leads: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    no_answer_calls: int = 0
    current_batch_start: int = 0
    last_processed_at: Optional[datetime] = None


class SyncCounts(BaseModel):
    inbound: int = 0
    outbound: int = 0
    conflicts: int = 0
    errors: int = 0


class IntegrationSyncState(BridgeModel):
    status: SyncWorkflowStatus
    last_sync_at: Optional[datetime] = None
    sync_counts: Dict[str, SyncCounts] = Field(default_factory=dict)
    current_integration: Optional[str] = None
    next_sync_at: Optional[datetime] = None
    error_details: Optional[str] = None


class WorkflowExecutionInfo(BridgeModel):
    workflow_id: str
    run_id: Optional[str] = None
    status: ExecutionStatus
    workflow_type: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    current_state: Optional[Dict[str, Any]] = None


class VapiCallTriggerResult(BridgeModel):
    """Outcome of asking the bridge to place an outbound VAPI call."""

    vapi_call_id: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)
