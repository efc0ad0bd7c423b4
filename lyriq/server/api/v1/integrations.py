"""
API endpoints for CRM and helpdesk integrations.

Manages the connection records, their field mappings and sync logs, and
triggers manual synchronisation through the orchestration bridge. Stored
credentials are write-only: responses list only the credential key names.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, status

from lyriq.core.database.repositories import IntegrationRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.io.integrations import (
    FieldMappingCreate,
    FieldMappingRead,
    FieldMappingUpdate,
    IntegrationCreate,
    IntegrationRead,
    IntegrationUpdate,
    MappingPreviewRequest,
    SyncLogRead,
    SyncNowResult,
)
from lyriq.server.services.deps import SessionDep, WorkflowClientDep
from lyriq.server.services.integrations import IntegrationService

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=IntegrationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Integration",
    description="Register a CRM or helpdesk integration. It starts disconnected and is seeded with the "
    "provider's default field mappings.",
    responses={404: {"description": "Company not found"}},
)
async def create_integration(data: IntegrationCreate, session: SessionDep) -> IntegrationRead:
    """
    Create an integration.

    - **provider**: salesforce, hubspot, zoho, pipedrive, zendesk, whatsapp, email, avaya or custom.
    - **credentials**: Provider credentials; never returned.
    - **sync_direction**: inbound, outbound or bidirectional.
    """
    integration = await IntegrationService(session).create(data.model_dump())
    return IntegrationRead.model_validate(integration)


@router.get(
    "",
    response_model=List[IntegrationRead],
    summary="List Integrations",
)
async def list_integrations(session: SessionDep, company_id: Optional[int] = None) -> List[IntegrationRead]:
    integrations = await IntegrationRepository(session).list(filters={"company_id": company_id})
    return [IntegrationRead.model_validate(i) for i in integrations]


@router.get(
    "/{integration_id}",
    response_model=IntegrationRead,
    summary="Get Integration",
    responses={404: {"description": "Integration not found"}},
)
async def get_integration(integration_id: int, session: SessionDep) -> IntegrationRead:
    return IntegrationRead.model_validate(await IntegrationService(session).get(integration_id))


@router.patch(
    "/{integration_id}",
    response_model=IntegrationRead,
    summary="Update Integration",
    description="Update the name, credentials or sync settings of an integration.",
    responses={404: {"description": "Integration not found"}},
)
async def update_integration(integration_id: int, data: IntegrationUpdate, session: SessionDep) -> IntegrationRead:
    integration = await IntegrationService(session).update(integration_id, data.model_dump(exclude_unset=True))
    return IntegrationRead.model_validate(integration)


@router.delete(
    "/{integration_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Integration",
    description="Delete an integration with its field mappings and sync logs.",
    responses={404: {"description": "Integration not found"}},
)
async def delete_integration(integration_id: int, session: SessionDep) -> None:
    await IntegrationService(session).delete(integration_id)


@router.post(
    "/{integration_id}/connect",
    response_model=IntegrationRead,
    summary="Connect Integration",
    responses={404: {"description": "Integration not found"}},
)
async def connect_integration(integration_id: int, session: SessionDep) -> IntegrationRead:
    return IntegrationRead.model_validate(await IntegrationService(session).connect(integration_id))


@router.post(
    "/{integration_id}/disconnect",
    response_model=IntegrationRead,
    summary="Disconnect Integration",
    responses={404: {"description": "Integration not found"}},
)
async def disconnect_integration(integration_id: int, session: SessionDep) -> IntegrationRead:
    return IntegrationRead.model_validate(await IntegrationService(session).disconnect(integration_id))


@router.post(
    "/{integration_id}/sync",
    response_model=SyncNowResult,
    summary="Sync Now",
    description="Request an immediate synchronisation of a connected integration.",
    responses={
        404: {"description": "Integration not found"},
        409: {"description": "Integration is not connected or cannot be synced"},
        502: {"description": "Orchestration bridge failed"},
    },
)
async def sync_integration(integration_id: int, session: SessionDep, client: WorkflowClientDep) -> SyncNowResult:
    """
    Sync an integration now.

    Signals the company's running integration-sync workflow when there is one;
    otherwise starts a new sync workflow for all connected integrations of the
    company. A "Manual" sync log entry is written either way.
    """
    workflow_id, signalled, log = await IntegrationService(session, client).sync_now(integration_id)
    return SyncNowResult(workflow_id=workflow_id, signalled=signalled, log=SyncLogRead.model_validate(log))


@router.get(
    "/{integration_id}/sync-logs",
    response_model=List[SyncLogRead],
    summary="List Sync Logs",
    description="Sync results of an integration, newest first.",
    responses={404: {"description": "Integration not found"}},
)
async def list_sync_logs(integration_id: int, session: SessionDep, limit: int = 50) -> List[SyncLogRead]:
    logs = await IntegrationService(session).list_sync_logs(integration_id, limit)
    return [SyncLogRead.model_validate(log) for log in logs]


@router.get(
    "/{integration_id}/mappings",
    response_model=List[FieldMappingRead],
    summary="List Field Mappings",
    responses={404: {"description": "Integration not found"}},
)
async def list_mappings(integration_id: int, session: SessionDep) -> List[FieldMappingRead]:
    mappings = await IntegrationService(session).list_mappings(integration_id)
    return [FieldMappingRead.model_validate(m) for m in mappings]


@router.post(
    "/{integration_id}/mappings",
    response_model=FieldMappingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Field Mapping",
    responses={404: {"description": "Integration not found"}},
)
async def add_mapping(integration_id: int, data: FieldMappingCreate, session: SessionDep) -> FieldMappingRead:
    """
    Add a field mapping.

    - **local_field**: Dotted local path, e.g. `call.summary` or `lead.name`.
    - **remote_object** / **remote_field**: Target on the remote system, e.g. `Task` / `Description`.
    - **direction**: outbound, inbound or bidirectional.
    """
    mapping = await IntegrationService(session).add_mapping(integration_id, data.model_dump())
    return FieldMappingRead.model_validate(mapping)


@router.patch(
    "/{integration_id}/mappings/{mapping_id}",
    response_model=FieldMappingRead,
    summary="Update Field Mapping",
    responses={404: {"description": "Integration or mapping not found"}},
)
async def update_mapping(
    integration_id: int, mapping_id: int, data: FieldMappingUpdate, session: SessionDep
) -> FieldMappingRead:
    mapping = await IntegrationService(session).update_mapping(
        integration_id, mapping_id, data.model_dump(exclude_unset=True)
    )
    return FieldMappingRead.model_validate(mapping)


@router.delete(
    "/{integration_id}/mappings/{mapping_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Field Mapping",
    responses={404: {"description": "Integration or mapping not found"}},
)
async def delete_mapping(integration_id: int, mapping_id: int, session: SessionDep) -> None:
    await IntegrationService(session).delete_mapping(integration_id, mapping_id)


@router.post(
    "/{integration_id}/mappings/preview",
    summary="Preview Field Mappings",
    description="Translate a sample record with the integration's enabled mappings.",
    responses={404: {"description": "Integration not found"}},
)
async def preview_mappings(
    integration_id: int, data: MappingPreviewRequest, session: SessionDep
) -> Dict[str, Any]:
    """
    Preview a translation.

    With **direction** outbound, **record** is a local record such as
    `{"call": {"summary": "..."}}` and the result is keyed by remote object.
    With inbound, **record** is keyed by remote object and the result is a local record.
    """
    return await IntegrationService(session).preview(integration_id, data.direction, data.record)
