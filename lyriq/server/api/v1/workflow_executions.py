"""
API endpoints for workflow executions on the orchestration bridge.

Starts call-handling, lead-processing and integration-sync workflows, records
each start locally, and proxies status, state, signals, termination and
history to the bridge. A status stream pushes execution status over
Server-Sent Events until the workflow finishes.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from fastapi import APIRouter, Request, status
from sse_starlette.sse import EventSourceResponse

from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import WorkflowExecutionStatus, WorkflowType
from lyriq.core.models.io.workflows import (
    CallHandlingStart,
    IntegrationSyncStart,
    LeadProcessingStart,
    SignalRequest,
    TerminateRequest,
    WorkflowExecutionRead,
)
from lyriq.server.services.deps import SessionDep, WorkflowClientDep
from lyriq.server.services.workflows import WorkflowService
from lyriq.workflow_api import WorkflowStatusMonitor
from lyriq.workflow_api.models import WorkflowExecutionInfo

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/call-handling",
    response_model=WorkflowExecutionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Start Call Handling Workflow",
    description="Start a workflow that follows one call through AI handling and human handoff.",
    responses={502: {"description": "Orchestration bridge failed"}},
)
async def start_call_handling(
    data: CallHandlingStart, session: SessionDep, client: WorkflowClientDep
) -> WorkflowExecutionRead:
    """
    Start a call-handling workflow.

    - **call_id** / **call_sid**: The local call and its Twilio SID.
    - **customer_number**: Caller or callee number.
    - **direction**: inbound or outbound.
    """
    execution = await WorkflowService(session, client).start_call_handling(data)
    return WorkflowExecutionRead.model_validate(execution)


@router.post(
    "/lead-processing",
    response_model=WorkflowExecutionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Start Lead Processing Workflow",
    description="Start an outbound campaign that calls leads in batches within a daily window.",
    responses={502: {"description": "Orchestration bridge failed"}},
)
async def start_lead_processing(
    data: LeadProcessingStart, session: SessionDep, client: WorkflowClientDep
) -> WorkflowExecutionRead:
    """
    Start a lead-processing workflow.

    - **campaign_id**: Campaign whose leads are called.
    - **ai_agent_id**: Agent placing the calls.
    - **call_window_start** / **call_window_end**: HH:MM local time.
    - **batch_size** / **max_concurrent_calls**: Pacing of the campaign.
    """
    execution = await WorkflowService(session, client).start_lead_processing(data)
    return WorkflowExecutionRead.model_validate(execution)


@router.post(
    "/integration-sync",
    response_model=WorkflowExecutionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Start Integration Sync Workflow",
    description="Start periodic synchronisation of every connected CRM or helpdesk integration of a company.",
    responses={
        409: {"description": "No connected integration to sync"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def start_integration_sync(
    data: IntegrationSyncStart, session: SessionDep, client: WorkflowClientDep
) -> WorkflowExecutionRead:
    execution = await WorkflowService(session, client).start_integration_sync(
        data.company_id, data.sync_interval_minutes
    )
    return WorkflowExecutionRead.model_validate(execution)


@router.get(
    "",
    response_model=List[WorkflowExecutionRead],
    summary="List Recorded Executions",
    description="List locally recorded executions, most recently started first.",
)
async def list_executions(
    session: SessionDep,
    client: WorkflowClientDep,
    company_id: Optional[int] = None,
    workflow_type: Optional[WorkflowType] = None,
    execution_status: Optional[WorkflowExecutionStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[WorkflowExecutionRead]:
    executions = await WorkflowService(session, client).list_executions(
        company_id=company_id,
        workflow_type=workflow_type.value if workflow_type else None,
        status=execution_status.value if execution_status else None,
        limit=limit,
        offset=offset,
    )
    return [WorkflowExecutionRead.model_validate(e) for e in executions]


@router.get(
    "/live",
    response_model=List[WorkflowExecutionInfo],
    summary="List Live Workflows",
    description="List the workflows the bridge currently reports for a company.",
    responses={502: {"description": "Orchestration bridge failed"}},
)
async def list_live_workflows(
    company_id: int,
    session: SessionDep,
    client: WorkflowClientDep,
    workflow_type: Optional[WorkflowType] = None,
) -> List[WorkflowExecutionInfo]:
    return await WorkflowService(session, client).list_live(
        company_id, workflow_type.value if workflow_type else None
    )


@router.get(
    "/{execution_id}",
    response_model=WorkflowExecutionRead,
    summary="Get Execution",
    description="Get a recorded execution; a running one has its status refreshed from the bridge first.",
    responses={404: {"description": "Execution not found"}},
)
async def get_execution(execution_id: int, session: SessionDep, client: WorkflowClientDep) -> WorkflowExecutionRead:
    execution = await WorkflowService(session, client).get_execution(execution_id)
    return WorkflowExecutionRead.model_validate(execution)


@router.get(
    "/{execution_id}/status",
    response_model=WorkflowExecutionInfo,
    summary="Get Bridge Status",
    responses={
        404: {"description": "Execution or workflow not found"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def get_execution_status(
    execution_id: int, session: SessionDep, client: WorkflowClientDep
) -> WorkflowExecutionInfo:
    execution = await WorkflowService(session, client).get_execution(execution_id, refresh=False)
    return await client.get_workflow_status(execution.workflow_id)


@router.get(
    "/{execution_id}/status/stream",
    summary="Stream Bridge Status",
    description="Stream the execution status via Server-Sent Events until the workflow is no longer running.",
    response_description="SSE stream of `status` events, ended by a final status or an `error` event.",
    responses={
        200: {"description": "Stream established", "content": {"text/event-stream": {}}},
        404: {"description": "Execution not found"},
    },
)
async def stream_execution_status(
    execution_id: int,
    request: Request,
    session: SessionDep,
    client: WorkflowClientDep,
):
    """
    Stream execution status.

    Polls the bridge every two seconds. Each poll emits a `status` event whose
    data is the bridge's execution info. The stream ends after the first
    non-RUNNING status. If the bridge cannot be reached before any status was
    obtained, a single `error` event is sent instead.
    """
    execution = await WorkflowService(session, client).get_execution(execution_id, refresh=False)
    monitor = WorkflowStatusMonitor(client, execution.workflow_id)
    logger.info(f"Starting status stream for workflow: {execution.workflow_id}")

    async def event_generator():
        async for snapshot in monitor.watch():
            if await request.is_disconnected():
                logger.info(f"Client disconnected from status stream for workflow: {execution.workflow_id}")
                return
            yield {"event": "status", "data": snapshot.model_dump_json(by_alias=True)}
        if monitor.state is None and monitor.error is not None:
            yield {"event": "error", "data": json.dumps({"detail": str(monitor.error)})}

    return EventSourceResponse(event_generator())


@router.get(
    "/{execution_id}/state",
    summary="Query Workflow State",
    description="Typed state of a call-handling, lead-processing or integration-sync workflow.",
    responses={
        400: {"description": "Workflow type has no state query"},
        404: {"description": "Execution not found"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def get_execution_state(execution_id: int, session: SessionDep, client: WorkflowClientDep) -> Any:
    service = WorkflowService(session, client)
    execution = await service.get_execution(execution_id, refresh=False)
    return await service.get_state(execution)


@router.post(
    "/{execution_id}/signal/{signal}",
    summary="Signal Workflow",
    description="Send a signal to a running workflow and return its refreshed state.",
    responses={
        400: {"description": "Signal not supported by the workflow type, or missing fields"},
        404: {"description": "Execution not found"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def signal_execution(
    execution_id: int,
    signal: str,
    data: SignalRequest,
    session: SessionDep,
    client: WorkflowClientDep,
) -> Any:
    """
    Signal a workflow.

    - call-handling: **human-handoff** (reason), **human-accepted** (agent_id),
      **call-ended**, **transcript** (speaker, text).
    - lead-processing: **pause**, **resume**, **cancel**.
    - integration-sync: **sync-now** (integration_id optional), **pause**, **resume**.
    """
    service = WorkflowService(session, client)
    execution = await service.get_execution(execution_id, refresh=False)
    state = await service.signal(execution, signal, data)
    if state is None:
        return {"signalled": signal}
    return state


@router.post(
    "/{execution_id}/terminate",
    response_model=WorkflowExecutionRead,
    summary="Terminate Workflow",
    responses={
        404: {"description": "Execution not found"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def terminate_execution(
    execution_id: int,
    session: SessionDep,
    client: WorkflowClientDep,
    data: Optional[TerminateRequest] = None,
) -> WorkflowExecutionRead:
    service = WorkflowService(session, client)
    execution = await service.get_execution(execution_id, refresh=False)
    execution = await service.terminate(execution, data.reason if data else None)
    return WorkflowExecutionRead.model_validate(execution)


@router.get(
    "/{execution_id}/history",
    summary="Get Workflow History",
    description="Event history of the workflow as reported by the bridge.",
    responses={404: {"description": "Execution not found"}},
)
async def get_execution_history(execution_id: int, session: SessionDep, client: WorkflowClientDep) -> List[Any]:
    service = WorkflowService(session, client)
    execution = await service.get_execution(execution_id, refresh=False)
    return await service.history(execution)
