"""
API endpoints for workflow definitions.

A workflow definition describes an outbound automation: where runs are
triggered from, the actions to take and the AI agent that places the call.
Running a workflow asks the orchestration bridge to place a VAPI call.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from lyriq.core.database.repositories import WorkflowRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import WorkflowStatus
from lyriq.core.models.io.workflows import (
    WorkflowCreate,
    WorkflowRead,
    WorkflowRunRequest,
    WorkflowRunResult,
    WorkflowUpdate,
)
from lyriq.server.services.deps import SessionDep, WorkflowClientDep
from lyriq.server.services.workflows import WorkflowService

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=WorkflowRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Workflow",
    description="Create a workflow definition. Trigger source and actions must come from the catalogs.",
    responses={
        400: {"description": "Unknown trigger source or action, or webhook trigger without URL"},
        404: {"description": "Company not found"},
    },
)
async def create_workflow(data: WorkflowCreate, session: SessionDep, client: WorkflowClientDep) -> WorkflowRead:
    """
    Create a workflow definition.

    - **trigger_source**: hubspot, salesforce, pipedrive, zoho, webhook, calendar, form or manual.
    - **actions** / **post_call_actions**: Ids from the workflow catalogs.
    - **webhook_url**: Required when the trigger source is webhook.
    - **ai_agent_id**: Agent whose voice configuration places the calls.
    """
    workflow = await WorkflowService(session, client).create(data.model_dump())
    return WorkflowRead.model_validate(workflow)


@router.get(
    "",
    response_model=List[WorkflowRead],
    summary="List Workflows",
    description="List workflow definitions, most recently updated first.",
)
async def list_workflows(
    session: SessionDep,
    company_id: Optional[int] = None,
    workflow_status: Optional[WorkflowStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[WorkflowRead]:
    workflows = await WorkflowRepository(session).list(
        limit=limit,
        offset=offset,
        filters={"company_id": company_id, "status": workflow_status.value if workflow_status else None},
    )
    return [WorkflowRead.model_validate(w) for w in workflows]


@router.get(
    "/{workflow_id}",
    response_model=WorkflowRead,
    summary="Get Workflow",
    responses={404: {"description": "Workflow not found"}},
)
async def get_workflow(workflow_id: int, session: SessionDep, client: WorkflowClientDep) -> WorkflowRead:
    return WorkflowRead.model_validate(await WorkflowService(session, client).get(workflow_id))


@router.patch(
    "/{workflow_id}",
    response_model=WorkflowRead,
    summary="Update Workflow",
    responses={
        400: {"description": "Unknown trigger source or action"},
        404: {"description": "Workflow not found"},
    },
)
async def update_workflow(
    workflow_id: int, data: WorkflowUpdate, session: SessionDep, client: WorkflowClientDep
) -> WorkflowRead:
    workflow = await WorkflowService(session, client).update(workflow_id, data.model_dump(exclude_unset=True))
    return WorkflowRead.model_validate(workflow)


@router.delete(
    "/{workflow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Workflow",
    responses={404: {"description": "Workflow not found"}},
)
async def delete_workflow(workflow_id: int, session: SessionDep, client: WorkflowClientDep) -> None:
    await WorkflowService(session, client).delete(workflow_id)


@router.post(
    "/{workflow_id}/run",
    response_model=WorkflowRunResult,
    summary="Run Workflow",
    description="Place an outbound call for this workflow through the orchestration bridge.",
    responses={
        400: {"description": "Phone number missing"},
        404: {"description": "Workflow not found"},
        409: {"description": "Workflow is inactive"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def run_workflow(
    workflow_id: int, data: WorkflowRunRequest, session: SessionDep, client: WorkflowClientDep
) -> WorkflowRunResult:
    """
    Run a workflow.

    - **phone_number**: Number to call.
    - **customer_name**: Passed to the voice assistant for personalisation.

    Returns the VAPI call id when the bridge reports one, the local call record
    created for it, and the recorded execution.
    """
    return await WorkflowService(session, client).run(workflow_id, data.phone_number, data.customer_name)
