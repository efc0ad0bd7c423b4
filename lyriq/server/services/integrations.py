"""
Integration service.

CRM and helpdesk connections per company, their field mappings, and manual
synchronisation through the bridge's integration-sync workflow.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database.base import encode_json_fields, utc_now
from lyriq.core.database.entities.integrations import INTEGRATION_JSON_FIELDS, FieldMapping, Integration, SyncLog
from lyriq.core.database.repositories import (
    CompanyRepository,
    FieldMappingRepository,
    IntegrationRepository,
    SyncLogRepository,
    WorkflowExecutionRepository,
)
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import (
    SYNCABLE_PROVIDERS,
    IntegrationStatus,
    MappingDirection,
    SyncLogStatus,
    WorkflowExecutionStatus,
    WorkflowType,
)
from lyriq.core.monitoring import log_workflow_event
from lyriq.workflow_api import WorkflowApiClient

from .errors import ConflictError, InvalidRequestError, NotFoundError
from .workflows import WorkflowService

logger = get_logger(__name__)

_MISSING = object()

# (local_field, remote_object, remote_field, direction, enabled)
DEFAULT_MAPPINGS: Dict[str, List[tuple]] = {
    "salesforce": [
        ("call.customer_phone", "Contact", "Phone", "bidirectional", True),
        ("call.customer_email", "Contact", "Email", "bidirectional", True),
        ("call.summary", "Task", "Description", "outbound", True),
        ("call.duration", "Task", "CallDurationInSeconds", "outbound", True),
        ("call.outcome", "Task", "Status", "outbound", True),
        ("lead.name", "Lead", "Name", "inbound", True),
        ("lead.company", "Lead", "Company", "inbound", False),
    ],
    "hubspot": [
        ("call.customer_phone", "Contact", "phone", "bidirectional", True),
        ("call.customer_email", "Contact", "email", "bidirectional", True),
        ("call.summary", "Call", "hs_call_body", "outbound", True),
        ("call.duration", "Call", "hs_call_duration", "outbound", True),
        ("lead.name", "Contact", "firstname", "inbound", True),
    ],
    "zoho": [
        ("call.customer_phone", "Contacts", "Phone", "bidirectional", True),
        ("call.summary", "Calls", "Description", "outbound", True),
        ("lead.name", "Leads", "Last_Name", "inbound", True),
    ],
    "pipedrive": [
        ("call.customer_phone", "Person", "phone", "bidirectional", True),
        ("call.summary", "Activity", "note", "outbound", True),
        ("lead.name", "Person", "name", "inbound", True),
    ],
    "zendesk": [
        ("call.customer_phone", "User", "phone", "bidirectional", True),
        ("call.customer_email", "User", "email", "bidirectional", True),
        ("call.summary", "Ticket", "description", "outbound", True),
    ],
}

_OUTBOUND = (MappingDirection.outbound.value, MappingDirection.bidirectional.value)
_INBOUND = (MappingDirection.inbound.value, MappingDirection.bidirectional.value)


def _get_path(data: Dict[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _set_path(data: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current = data
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value


def apply_outbound(mappings: Iterable[FieldMapping], record: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Translate a local record into ``{remote_object: {remote_field: value}}``.

    Only enabled outbound and bidirectional mappings apply; local values that
    are absent or ``None`` are skipped.
    """
    remote: Dict[str, Dict[str, Any]] = {}
    for mapping in mappings:
        if not mapping.enabled or mapping.direction not in _OUTBOUND:
            continue
        value = _get_path(record, mapping.local_field)
        if value is _MISSING or value is None:
            continue
        remote.setdefault(mapping.remote_object, {})[mapping.remote_field] = value
    return remote


def apply_inbound(mappings: Iterable[FieldMapping], remote: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Translate ``{remote_object: {remote_field: value}}`` into a nested local dict."""
    local: Dict[str, Any] = {}
    for mapping in mappings:
        if not mapping.enabled or mapping.direction not in _INBOUND:
            continue
        remote_object = remote.get(mapping.remote_object)
        if not isinstance(remote_object, dict):
            continue
        value = remote_object.get(mapping.remote_field, _MISSING)
        if value is _MISSING or value is None:
            continue
        _set_path(local, mapping.local_field, value)
    return local


def conflicting_local_field(local_field: str, others: Iterable[str]) -> Optional[str]:
    """Return the first of ``others`` that nests inside ``local_field`` or contains it."""
    for other in others:
        if other.startswith(local_field + ".") or local_field.startswith(other + "."):
            return other
    return None


def default_mappings_for(provider: str, integration_id: int) -> List[FieldMapping]:
    return [
        FieldMapping(
            integration_id=integration_id,
            local_field=local_field,
            remote_object=remote_object,
            remote_field=remote_field,
            direction=direction,
            enabled=enabled,
        )
        for local_field, remote_object, remote_field, direction, enabled in DEFAULT_MAPPINGS.get(provider, [])
    ]


class IntegrationService:
    """Integration records, mappings, sync logs and manual sync."""

    def __init__(self, session: AsyncSession, client: Optional[WorkflowApiClient] = None) -> None:
        self.session = session
        self.client = client
        self.integrations = IntegrationRepository(session)
        self.mappings = FieldMappingRepository(session)
        self.sync_logs = SyncLogRepository(session)
        self.companies = CompanyRepository(session)
        self.executions = WorkflowExecutionRepository(session)

    async def get(self, integration_id: int) -> Integration:
        integration = await self.integrations.get_by_id(integration_id)
        if integration is None:
            raise NotFoundError("Integration", integration_id)
        return integration

    async def create(self, data: dict) -> Integration:
        if await self.companies.get_by_id(data["company_id"]) is None:
            raise NotFoundError("Company", data["company_id"])
        if not data.get("name"):
            data = {**data, "name": str(data["provider"]).capitalize()}
        integration = Integration(
            **encode_json_fields(data, INTEGRATION_JSON_FIELDS),
            status=IntegrationStatus.disconnected.value,
        )
        integration = await self.integrations.create(integration)
        seeded = default_mappings_for(integration.provider, integration.id)
        if seeded:
            await self.mappings.create_many(seeded)
        logger.info(
            f"Created {integration.provider} integration {integration.id} for company {integration.company_id} "
            f"with {len(seeded)} default mappings"
        )
        return integration

    async def update(self, integration_id: int, changes: dict) -> Integration:
        integration = await self.get(integration_id)
        for key, value in encode_json_fields(changes, INTEGRATION_JSON_FIELDS).items():
            setattr(integration, key, value)
        return await self.integrations.update(integration)

    async def delete(self, integration_id: int) -> None:
        if not await self.integrations.delete(integration_id):
            raise NotFoundError("Integration", integration_id)

    async def connect(self, integration_id: int) -> Integration:
        integration = await self.get(integration_id)
        integration.status = IntegrationStatus.connected.value
        integration.connected_at = utc_now()
        logger.info(f"Integration {integration_id} connected")
        return await self.integrations.update(integration)

    async def disconnect(self, integration_id: int) -> Integration:
        integration = await self.get(integration_id)
        integration.status = IntegrationStatus.disconnected.value
        integration.connected_at = None
        logger.info(f"Integration {integration_id} disconnected")
        return await self.integrations.update(integration)

    # ------------------------------------------------------------------
    # Field mappings
    # ------------------------------------------------------------------

    async def list_mappings(self, integration_id: int) -> List[FieldMapping]:
        await self.get(integration_id)
        return await self.mappings.list_for_integration(integration_id)

    async def add_mapping(self, integration_id: int, data: dict) -> FieldMapping:
        await self.get(integration_id)
        await self._ensure_local_field_free(integration_id, data["local_field"])
        return await self.mappings.create(FieldMapping(integration_id=integration_id, **data))

    async def _ensure_local_field_free(
        self, integration_id: int, local_field: str, exclude_id: Optional[int] = None
    ) -> None:
        existing = await self.mappings.list_for_integration(integration_id)
        clash = conflicting_local_field(local_field, (m.local_field for m in existing if m.id != exclude_id))
        if clash:
            raise InvalidRequestError(
                f"Local field '{local_field}' conflicts with mapped field '{clash}'",
                details={"local_field": local_field, "conflicts_with": clash},
            )

    async def _get_mapping(self, integration_id: int, mapping_id: int) -> FieldMapping:
        mapping = await self.mappings.get_by_id(mapping_id)
        if mapping is None or mapping.integration_id != integration_id:
            raise NotFoundError("Field mapping", mapping_id)
        return mapping

    async def update_mapping(self, integration_id: int, mapping_id: int, changes: dict) -> FieldMapping:
        mapping = await self._get_mapping(integration_id, mapping_id)
        if changes.get("local_field"):
            await self._ensure_local_field_free(integration_id, changes["local_field"], exclude_id=mapping_id)
        for key, value in changes.items():
            setattr(mapping, key, value)
        return await self.mappings.update(mapping)

    async def delete_mapping(self, integration_id: int, mapping_id: int) -> None:
        await self._get_mapping(integration_id, mapping_id)
        await self.mappings.delete(mapping_id)

    async def preview(self, integration_id: int, direction: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Translate a record with the integration's current mappings."""
        mappings = await self.list_mappings(integration_id)
        if direction == MappingDirection.inbound.value:
            return apply_inbound(mappings, record)
        return apply_outbound(mappings, record)

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def list_sync_logs(self, integration_id: int, limit: int = 50) -> List[SyncLog]:
        await self.get(integration_id)
        return await self.sync_logs.list_for_integration(integration_id, limit)

    async def sync_now(self, integration_id: int) -> tuple[str, bool, SyncLog]:
        """Request an immediate sync of one integration.

        Signals the company's running integration-sync workflow when there is
        one, otherwise starts a new workflow covering every connected
        integration of the company.

        Returns:
            (bridge workflow id, whether an existing workflow was signalled, sync log)
        """
        integration = await self.get(integration_id)
        if integration.status != IntegrationStatus.connected.value:
            raise ConflictError(f"Integration {integration_id} is not connected")
        if integration.provider not in SYNCABLE_PROVIDERS:
            raise ConflictError(f"Integration provider {integration.provider} cannot be synced")
        if self.client is None:
            raise ConflictError("Workflow bridge is not available")

        workflows = WorkflowService(self.session, self.client)
        running = await self.executions.latest_running(integration.company_id, WorkflowType.integration_sync.value)
        if running is not None:
            running = await workflows.refresh_execution(running)
            if running.status != WorkflowExecutionStatus.RUNNING.value:
                running = None

        if running is not None:
            await self.client.trigger_immediate_sync(running.workflow_id, str(integration.id))
            workflow_id, signalled = running.workflow_id, True
            message = f"Sync requested on running workflow {workflow_id}"
        else:
            execution = await workflows.start_integration_sync(
                integration.company_id, integration.sync_interval_minutes
            )
            workflow_id, signalled = execution.workflow_id, False
            message = f"Started sync workflow {workflow_id}"

        log = await self.sync_logs.create(
            SyncLog(
                integration_id=integration.id,
                sync_type="Manual",
                records=0,
                status=SyncLogStatus.success.value,
                message=message,
                details=json.dumps({"workflow_id": workflow_id, "signalled": signalled}),
            )
        )
        integration.last_sync_at = utc_now()
        await self.integrations.update(integration)
        log_workflow_event(
            "integration_sync_requested",
            workflow_id,
            company_id=integration.company_id,
            integration_id=integration.id,
            signalled=signalled,
        )
        return workflow_id, signalled, log
