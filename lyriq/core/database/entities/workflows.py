"""
Workflow entity models.

``Workflow`` is an operator-defined automation (a trigger plus actions).
``WorkflowExecution`` records each workflow started on the orchestration
bridge so the dashboard can list and follow them.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from lyriq.core.models.domain.enums import WorkflowExecutionStatus, WorkflowStatus

from ..base import Base, load_json_dict, load_json_list, utc_now

WORKFLOW_JSON_FIELDS = ("tools", "actions", "post_call_actions")


class WorkflowBase(Base):
    """Base fields for a workflow definition."""

    company_id: int = Field(foreign_key="companies.id", index=True)
    name: str = Field(description="Workflow name")
    description: Optional[str] = Field(default=None)
    trigger_type: str = Field(default="temporal-outbound")
    trigger_source: str = Field(default="manual", description="Where runs originate")
    status: str = Field(default=WorkflowStatus.active.value, index=True)
    tools: str = Field(default="[]", description="JSON array of tool ids")
    actions: str = Field(default="[]", description="JSON array of workflow action ids")
    post_call_actions: str = Field(default="[]", description="JSON array of post-call action ids")
    webhook_url: Optional[str] = Field(default=None)
    ai_agent_id: Optional[int] = Field(default=None, foreign_key="ai_agents.id")
    vapi_assistant_id: Optional[str] = Field(default=None)
    vapi_phone_number_id: Optional[str] = Field(default=None)


class Workflow(WorkflowBase, table=True):
    """Persistent workflow definition.

    Table: workflows
    """

    __tablename__ = "workflows"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, index=True, sa_column_kwargs={"onupdate": utc_now})

    def get_actions_list(self) -> List[str]:
        return load_json_list(self.actions)

    def get_post_call_actions_list(self) -> List[str]:
        return load_json_list(self.post_call_actions)

    def __repr__(self) -> str:
        return f"Workflow(id={self.id}, name={self.name}, status={self.status})"


class WorkflowExecution(Base, table=True):
    """A workflow started on the orchestration bridge.

    Table: workflow_executions
    """

    __tablename__ = "workflow_executions"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    company_id: Optional[int] = Field(default=None, foreign_key="companies.id", index=True)
    workflow_definition_id: Optional[int] = Field(default=None, foreign_key="workflows.id", index=True)

    workflow_type: str = Field(index=True, description="call-handling, lead-processing, integration-sync, vapi-call")
    workflow_id: str = Field(index=True, unique=True, description="Workflow id on the bridge (or VAPI call id)")
    run_id: Optional[str] = Field(default=None)
    status: str = Field(default=WorkflowExecutionStatus.RUNNING.value, index=True)
    input_payload: str = Field(default="{}", description="JSON object sent when starting")

    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = Field(default=None)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_input_payload(self) -> dict:
        return load_json_dict(self.input_payload)

    def __repr__(self) -> str:
        return f"WorkflowExecution(id={self.id}, type={self.workflow_type}, workflow_id={self.workflow_id})"
