"""
Workflow I/O models for API requests and responses.

Covers operator-defined workflow definitions, their manual runs, and the
locally recorded executions of orchestration-bridge workflows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lyriq.core.models.domain.enums import WorkflowStatus

from ._json_fields import decode_json_dict, decode_json_list


class WorkflowRead(BaseModel):
    """Schema for reading a workflow definition from API."""

    id: int
    company_id: int
    name: str
    description: Optional[str] = None
    trigger_type: str
    trigger_source: str
    status: WorkflowStatus
    tools: List[str]
    actions: List[str]
    post_call_actions: List[str]
    webhook_url: Optional[str] = None
    ai_agent_id: Optional[int] = None
    vapi_assistant_id: Optional[str] = None
    vapi_phone_number_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    _decode_lists = field_validator("tools", "actions", "post_call_actions", mode="before")(decode_json_list)

    class Config:
        from_attributes = True


class WorkflowCreate(BaseModel):
    """Schema for creating a workflow definition via API."""

    model_config = ConfigDict(use_enum_values=True)

    company_id: int
    name: str = Field(min_length=1)
    description: Optional[str] = None
    trigger_type: str = "temporal-outbound"
    trigger_source: str = Field(default="manual", description="hubspot, salesforce, ..., manual")
    status: WorkflowStatus = WorkflowStatus.active
    tools: List[str] = Field(default_factory=list)
    actions: List[str] = Field(default_factory=list)
    post_call_actions: List[str] = Field(default_factory=list)
    webhook_url: Optional[str] = None
    ai_agent_id: Optional[int] = None
    vapi_assistant_id: Optional[str] = None
    vapi_phone_number_id: Optional[str] = None


class WorkflowUpdate(BaseModel):
    """Schema for updating a workflow definition via API."""

    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = None
    description: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_source: Optional[str] = None
    status: Optional[WorkflowStatus] = None
    tools: Optional[List[str]] = None
    actions: Optional[List[str]] = None
    post_call_actions: Optional[List[str]] = None
    webhook_url: Optional[str] = None
    ai_agent_id: Optional[int] = None
    vapi_assistant_id: Optional[str] = None
    vapi_phone_number_id: Optional[str] = None


class WorkflowRunRequest(BaseModel):
    phone_number: str = Field(description="Number to call")
    customer_name: Optional[str] = None


class WorkflowRunResult(BaseModel):
    vapi_call_id: Optional[str] = None
    call_id: Optional[int] = None
    execution_id: int


class WorkflowExecutionRead(BaseModel):
    """Schema for reading a recorded workflow execution."""

    id: int
    company_id: Optional[int] = None
    workflow_definition_id: Optional[int] = None
    workflow_type: str
    workflow_id: str
    run_id: Optional[str] = None
    status: str
    input_payload: Dict[str, Any] = Field(default_factory=dict)
    started_at: datetime
    completed_at: Optional[datetime] = None
    updated_at: datetime

    _decode_payload = field_validator("input_payload", mode="before")(decode_json_dict)

    class Config:
        from_attributes = True


class CallHandlingStart(BaseModel):
    company_id: int
    call_id: str
    call_sid: str
    customer_number: str
    direction: Literal["inbound", "outbound"] = "inbound"
    agent_id: Optional[str] = None
    workflow_config_id: Optional[str] = None


class LeadProcessingStart(BaseModel):
    company_id: int
    campaign_id: str
    ai_agent_id: str
    batch_size: int = Field(default=10, ge=1)
    call_window_start: str = "09:00"
    call_window_end: str = "17:00"
    max_concurrent_calls: int = Field(default=5, ge=1)


class IntegrationSyncStart(BaseModel):
    company_id: int
    sync_interval_minutes: int = Field(default=15, ge=1)


class SignalRequest(BaseModel):
    """Payload of a signal forwarded to a running workflow."""

    reason: Optional[str] = None
    agent_id: Optional[str] = None
    speaker: Optional[str] = None
    text: Optional[str] = None
    integration_id: Optional[str] = None


class TerminateRequest(BaseModel):
    reason: Optional[str] = None
