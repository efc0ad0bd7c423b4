"""
Workflow service.

Manages operator-defined workflow definitions, runs them by asking the
orchestration bridge to place an outbound VAPI call, and records every
workflow started on the bridge as a ``WorkflowExecution`` so the dashboard
can list, follow, signal and terminate it.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database.base import encode_json_fields, utc_now
from lyriq.core.database.entities.calls import Call
from lyriq.core.database.entities.integrations import Integration
from lyriq.core.database.entities.workflows import WORKFLOW_JSON_FIELDS, Workflow, WorkflowExecution
from lyriq.core.database.repositories import (
    CallRepository,
    CompanyRepository,
    FieldMappingRepository,
    IntegrationRepository,
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import (
    SYNCABLE_PROVIDERS,
    CallDirection,
    CallStatus,
    WorkflowExecutionStatus,
    WorkflowStatus,
    WorkflowType,
)
from lyriq.core.models.io.workflows import (
    CallHandlingStart,
    LeadProcessingStart,
    SignalRequest,
    WorkflowRunResult,
)
from lyriq.core.monitoring import log_workflow_event
from lyriq.workflow_api import (
    CallWorkflowMonitor,
    CampaignWorkflowMonitor,
    IntegrationSyncMonitor,
    WorkflowApiClient,
    WorkflowApiError,
    WorkflowListMonitor,
)
from lyriq.workflow_api.models import (
    CallHandlingInput,
    IntegrationSyncConfig,
    IntegrationSyncInput,
    LeadProcessingInput,
    WorkflowExecutionInfo,
    WorkflowStartResult,
)

from .catalog import validate_workflow_selection
from .errors import ConflictError, InvalidRequestError, NotFoundError

logger = get_logger(__name__)

_TERMINAL_STATUSES = {s.value for s in WorkflowExecutionStatus} - {WorkflowExecutionStatus.RUNNING.value}

# Signals each workflow type accepts, and the monitor action that sends them
_SIGNALS: Dict[str, tuple[str, ...]] = {
    WorkflowType.call_handling.value: ("human-handoff", "human-accepted", "call-ended", "transcript"),
    WorkflowType.lead_processing.value: ("pause", "resume", "cancel"),
    WorkflowType.integration_sync.value: ("sync-now", "pause", "resume"),
}


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def sync_config_for(integration: Integration, sync_entities: List[str]) -> IntegrationSyncConfig:
    return IntegrationSyncConfig(
        id=str(integration.id),
        type=integration.provider,
        credentials=integration.get_credentials(),
        sync_direction=integration.sync_direction,
        sync_entities=sync_entities,
    )


class WorkflowService:
    """Workflow definitions, runs and bridge executions of one request."""

    def __init__(self, session: AsyncSession, client: WorkflowApiClient) -> None:
        self.session = session
        self.client = client
        self.workflows = WorkflowRepository(session)
        self.executions = WorkflowExecutionRepository(session)
        self.calls = CallRepository(session)
        self.companies = CompanyRepository(session)
        self.integrations = IntegrationRepository(session)
        self.mappings = FieldMappingRepository(session)

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    async def get(self, workflow_id: int) -> Workflow:
        workflow = await self.workflows.get_by_id(workflow_id)
        if workflow is None:
            raise NotFoundError("Workflow", workflow_id)
        return workflow

    async def create(self, data: dict) -> Workflow:
        if await self.companies.get_by_id(data["company_id"]) is None:
            raise NotFoundError("Company", data["company_id"])
        validate_workflow_selection(data, webhook_url=data.get("webhook_url"))
        workflow = Workflow(**encode_json_fields(data, WORKFLOW_JSON_FIELDS))
        workflow = await self.workflows.create(workflow)
        logger.info(f"Created workflow {workflow.id} ({workflow.name}) for company {workflow.company_id}")
        return workflow

    async def update(self, workflow_id: int, changes: dict) -> Workflow:
        workflow = await self.get(workflow_id)
        effective = {"trigger_source": changes.get("trigger_source", workflow.trigger_source), **changes}
        validate_workflow_selection(effective, webhook_url=changes.get("webhook_url", workflow.webhook_url))
        for key, value in encode_json_fields(changes, WORKFLOW_JSON_FIELDS).items():
            setattr(workflow, key, value)
        return await self.workflows.update(workflow)

    async def delete(self, workflow_id: int) -> None:
        if not await self.workflows.delete(workflow_id):
            raise NotFoundError("Workflow", workflow_id)

    async def run(self, workflow_id: int, phone_number: str, customer_name: Optional[str] = None) -> WorkflowRunResult:
        """Place an outbound call for a workflow through the bridge.

        Args:
            workflow_id: Workflow definition to run
            phone_number: Number to call
            customer_name: Name passed to the voice assistant

        Returns:
            The VAPI call id (when the bridge returned one), the local call record
            id, and the execution id
        """
        if not phone_number or not phone_number.strip():
            raise InvalidRequestError("Phone number is required")
        workflow = await self.get(workflow_id)
        if workflow.status != WorkflowStatus.active.value:
            raise ConflictError(f"Workflow {workflow_id} is inactive")

        phone_number = phone_number.strip()
        triggered = await self.client.trigger_vapi_call(
            phone_number,
            customer_name=customer_name,
            workflow_id=str(workflow.id),
            trigger_source=workflow.trigger_source,
        )

        call_id = None
        if triggered.vapi_call_id:
            call = await self.calls.create(
                Call(
                    company_id=workflow.company_id,
                    customer_number=phone_number,
                    customer_name=customer_name,
                    direction=CallDirection.outbound.value,
                    status=CallStatus.queued.value,
                    ai_agent_id=workflow.ai_agent_id,
                    workflow_id=workflow.id,
                    vapi_call_id=triggered.vapi_call_id,
                    started_at=utc_now(),
                )
            )
            call_id = call.id

        execution = await self.executions.create(
            WorkflowExecution(
                company_id=workflow.company_id,
                workflow_definition_id=workflow.id,
                workflow_type=WorkflowType.vapi_call.value,
                workflow_id=triggered.vapi_call_id or f"vapi-call-{uuid.uuid4().hex}",
                status=WorkflowExecutionStatus.RUNNING.value,
                input_payload=json.dumps({"phone_number": phone_number, "customer_name": customer_name}),
            )
        )
        log_workflow_event(
            "workflow_run",
            execution.workflow_id,
            company_id=workflow.company_id,
            workflow_definition_id=workflow.id,
            vapi_call_id=triggered.vapi_call_id,
        )
        return WorkflowRunResult(vapi_call_id=triggered.vapi_call_id, call_id=call_id, execution_id=execution.id)

    # ------------------------------------------------------------------
    # Executions
    # ------------------------------------------------------------------

    async def _record_start(
        self, company_id: int, workflow_type: WorkflowType, started: WorkflowStartResult, payload: Dict[str, Any]
    ) -> WorkflowExecution:
        execution = await self.executions.create(
            WorkflowExecution(
                company_id=company_id,
                workflow_type=workflow_type.value,
                workflow_id=started.workflow_id,
                run_id=started.run_id,
                status=WorkflowExecutionStatus.RUNNING.value,
                input_payload=json.dumps(payload, default=str),
            )
        )
        log_workflow_event(f"{workflow_type.value}_started", started.workflow_id, company_id=company_id)
        return execution

    async def start_call_handling(self, params: CallHandlingStart) -> WorkflowExecution:
        bridge_input = CallHandlingInput(**params.model_dump(exclude={"company_id"}))
        started = await self.client.start_call_handling(bridge_input)
        return await self._record_start(
            params.company_id, WorkflowType.call_handling, started, bridge_input.model_dump(by_alias=True)
        )

    async def start_lead_processing(self, params: LeadProcessingStart) -> WorkflowExecution:
        bridge_input = LeadProcessingInput(
            company_id=str(params.company_id), **params.model_dump(exclude={"company_id"})
        )
        started = await self.client.start_lead_processing(bridge_input)
        return await self._record_start(
            params.company_id, WorkflowType.lead_processing, started, bridge_input.model_dump(by_alias=True)
        )

    async def start_integration_sync(self, company_id: int, sync_interval_minutes: int = 15) -> WorkflowExecution:
        """Start a sync workflow covering every connected, syncable integration of a company."""
        connected = [
            i for i in await self.integrations.list_connected(company_id) if i.provider in SYNCABLE_PROVIDERS
        ]
        if not connected:
            raise ConflictError(f"Company {company_id} has no connected integrations to sync")
        configs = []
        for integration in connected:
            mappings = await self.mappings.list_for_integration(integration.id)
            entities = sorted({m.remote_object for m in mappings if m.enabled})
            configs.append(sync_config_for(integration, entities))
        bridge_input = IntegrationSyncInput(
            company_id=str(company_id), integrations=configs, sync_interval_minutes=sync_interval_minutes
        )
        started = await self.client.start_integration_sync(bridge_input)
        # Credentials stay out of the stored payload
        payload = bridge_input.model_dump(by_alias=True, exclude={"integrations": {"__all__": {"credentials"}}})
        return await self._record_start(company_id, WorkflowType.integration_sync, started, payload)

    async def get_execution(self, execution_id: int, *, refresh: bool = True) -> WorkflowExecution:
        execution = await self.executions.get_by_id(execution_id)
        if execution is None:
            raise NotFoundError("Workflow execution", execution_id)
        if refresh:
            execution = await self.refresh_execution(execution)
        return execution

    async def refresh_execution(self, execution: WorkflowExecution) -> WorkflowExecution:
        """Copy the bridge's status onto a running execution; a bridge failure keeps the stored status."""
        if execution.workflow_type == WorkflowType.vapi_call.value:
            return execution
        if execution.status != WorkflowExecutionStatus.RUNNING.value:
            return execution
        try:
            info = await self.client.get_workflow_status(execution.workflow_id)
        except WorkflowApiError as e:
            logger.warning(f"Could not refresh workflow {execution.workflow_id}: {e.message}")
            return execution
        if info.status == execution.status:
            return execution
        execution.status = info.status
        if info.status in _TERMINAL_STATUSES:
            execution.completed_at = _naive_utc(info.completed_at) if info.completed_at else utc_now()
        log_workflow_event(
            "workflow_status_changed", execution.workflow_id, company_id=execution.company_id, status=info.status
        )
        return await self.executions.update(execution)

    async def list_executions(
        self,
        company_id: Optional[int] = None,
        workflow_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[WorkflowExecution]:
        return await self.executions.list(
            limit=limit,
            offset=offset,
            filters={"company_id": company_id, "workflow_type": workflow_type, "status": status},
        )

    async def list_live(self, company_id: int, workflow_type: Optional[str] = None) -> List[WorkflowExecutionInfo]:
        """Workflows the bridge currently knows for a company; raises when the bridge is unreachable."""
        monitor = WorkflowListMonitor(self.client, str(company_id), workflow_type)
        workflows = await monitor.refresh()
        if monitor.error is not None:
            raise monitor.error
        return workflows

    async def get_state(self, execution: WorkflowExecution):
        """Typed state query for the execution's workflow type."""
        if execution.workflow_type == WorkflowType.call_handling.value:
            return await self.client.get_call_state(execution.workflow_id)
        if execution.workflow_type == WorkflowType.lead_processing.value:
            return await self.client.get_campaign_state(execution.workflow_id)
        if execution.workflow_type == WorkflowType.integration_sync.value:
            return await self.client.get_sync_state(execution.workflow_id)
        raise InvalidRequestError(f"Workflows of type {execution.workflow_type} have no state query")

    async def signal(self, execution: WorkflowExecution, signal: str, body: SignalRequest):
        """Send a signal through the type's monitor and return the refreshed state.

        Transcript signals return ``None``; the state is not re-queried for them.
        """
        allowed = _SIGNALS.get(execution.workflow_type, ())
        if signal not in allowed:
            raise InvalidRequestError(
                f"Signal '{signal}' is not supported by {execution.workflow_type} workflows",
                details={"allowed": list(allowed)},
            )
        wid = execution.workflow_id

        if execution.workflow_type == WorkflowType.call_handling.value:
            call_monitor = CallWorkflowMonitor(self.client, wid)
            if signal == "human-handoff":
                await call_monitor.request_handoff(body.reason or "Requested by operator")
            elif signal == "human-accepted":
                if not body.agent_id:
                    raise InvalidRequestError("agent_id is required")
                await call_monitor.accept_handoff(body.agent_id)
            elif signal == "call-ended":
                await call_monitor.end_call()
            else:
                if not body.speaker or not body.text:
                    raise InvalidRequestError("speaker and text are required")
                await call_monitor.send_transcript(body.speaker, body.text)
                return None
            return self._monitor_state(call_monitor)

        if execution.workflow_type == WorkflowType.lead_processing.value:
            campaign_monitor = CampaignWorkflowMonitor(self.client, wid)
            if signal == "pause":
                await campaign_monitor.pause()
            elif signal == "resume":
                await campaign_monitor.resume()
            else:
                await campaign_monitor.cancel()
            return self._monitor_state(campaign_monitor)

        sync_monitor = IntegrationSyncMonitor(self.client, wid)
        if signal == "sync-now":
            await sync_monitor.trigger_sync(body.integration_id)
        elif signal == "pause":
            await sync_monitor.pause()
        else:
            await sync_monitor.resume()
        return self._monitor_state(sync_monitor)

    @staticmethod
    def _monitor_state(monitor):
        if monitor.error is not None:
            logger.warning(f"Signal sent but state refresh failed: {monitor.error}")
        return monitor.state

    async def terminate(self, execution: WorkflowExecution, reason: Optional[str] = None) -> WorkflowExecution:
        await self.client.terminate_workflow(execution.workflow_id, reason or "Terminated by operator")
        execution.status = WorkflowExecutionStatus.TERMINATED.value
        execution.completed_at = utc_now()
        log_workflow_event("workflow_terminated", execution.workflow_id, company_id=execution.company_id)
        return await self.executions.update(execution)

    async def history(self, execution: WorkflowExecution) -> List[Any]:
        return await self.client.get_workflow_history(execution.workflow_id)
