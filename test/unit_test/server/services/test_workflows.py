"""Unit tests for WorkflowService against a fake workflow bridge."""

from __future__ import annotations

import json
from datetime import datetime

import httpx
import pytest

from lyriq.core.database.entities import FieldMapping, Integration, Workflow, WorkflowExecution
from lyriq.core.database.repositories import CallRepository
from lyriq.core.models.io.workflows import CallHandlingStart, LeadProcessingStart, SignalRequest
from lyriq.server.services.errors import ConflictError, InvalidRequestError, NotFoundError
from lyriq.server.services.workflows import WorkflowService
from lyriq.workflow_api import WorkflowApiError
from lyriq.workflow_api.models import CallState, CampaignState, IntegrationSyncState


@pytest.fixture
def service(session, workflow_client):
    return WorkflowService(session, workflow_client)


@pytest.fixture
async def workflow(service, company) -> Workflow:
    return await service.create(
        {
            "company_id": company.id,
            "name": "Renewal reminders",
            "trigger_source": "hubspot",
            "actions": ["outbound-call", "send-sms"],
            "post_call_actions": ["log-call"],
        }
    )


async def _execution(session, company, workflow_type="call-handling", workflow_id="call-handling-9", **fields):
    execution = WorkflowExecution(
        company_id=company.id, workflow_type=workflow_type, workflow_id=workflow_id, **fields
    )
    session.add(execution)
    await session.commit()
    await session.refresh(execution)
    return execution


class TestDefinitions:
    async def test_create_encodes_lists(self, workflow):
        assert json.loads(workflow.actions) == ["outbound-call", "send-sms"]
        assert workflow.status == "active"

    async def test_create_for_missing_company(self, service):
        with pytest.raises(NotFoundError):
            await service.create({"company_id": 42, "name": "x"})

    async def test_create_rejects_unknown_catalog_ids(self, service, company):
        with pytest.raises(InvalidRequestError) as exc_info:
            await service.create({"company_id": company.id, "name": "x", "actions": ["teleport"]})

        assert exc_info.value.details["unknown"] == ["teleport"]

    async def test_webhook_trigger_needs_url(self, service, company):
        with pytest.raises(InvalidRequestError):
            await service.create({"company_id": company.id, "name": "x", "trigger_source": "webhook"})

        created = await service.create(
            {
                "company_id": company.id,
                "name": "x",
                "trigger_source": "webhook",
                "webhook_url": "http://localhost/hook",
            }
        )
        assert created.trigger_source == "webhook"

    async def test_update_validates_effective_values(self, service, workflow):
        with pytest.raises(InvalidRequestError):
            await service.update(workflow.id, {"trigger_source": "webhook"})

        await service.update(workflow.id, {"webhook_url": "http://localhost/hook"})
        updated = await service.update(workflow.id, {"trigger_source": "webhook", "tools": ["transfer"]})

        assert updated.trigger_source == "webhook"
        assert json.loads(updated.tools) == ["transfer"]

    async def test_delete(self, service, workflow):
        await service.delete(workflow.id)

        with pytest.raises(NotFoundError):
            await service.get(workflow.id)
        with pytest.raises(NotFoundError):
            await service.delete(workflow.id)


class TestRun:
    async def test_places_call_and_records_execution(self, session, service, bridge, workflow):
        result = await service.run(workflow.id, " +61400000001 ", "Jo")

        assert bridge.paths() == ["/api/campaigns/trigger-vapi-call"]
        assert bridge.body() == {
            "phoneNumber": "+61400000001",
            "customerName": "Jo",
            "workflowId": str(workflow.id),
            "triggerSource": "hubspot",
        }
        assert result.vapi_call_id == "vapi-call-1"

        call = await CallRepository(session).get_by_id(result.call_id)
        assert call.direction == "outbound"
        assert call.status == "queued"
        assert call.vapi_call_id == "vapi-call-1"
        assert call.workflow_id == workflow.id

        execution = await service.get_execution(result.execution_id)
        assert execution.workflow_type == "vapi-call"
        assert execution.workflow_id == "vapi-call-1"
        assert execution.workflow_definition_id == workflow.id
        assert json.loads(execution.input_payload) == {"phone_number": "+61400000001", "customer_name": "Jo"}

    async def test_without_vapi_call_id(self, service, bridge, workflow):
        bridge.vapi_call_id = None

        result = await service.run(workflow.id, "+61400000001")

        assert result.vapi_call_id is None
        assert result.call_id is None
        execution = await service.get_execution(result.execution_id)
        assert execution.workflow_id.startswith("vapi-call-")

    async def test_blank_phone(self, service, bridge, workflow):
        with pytest.raises(InvalidRequestError):
            await service.run(workflow.id, "  ")
        assert bridge.requests == []

    async def test_inactive_workflow(self, service, bridge, workflow):
        await service.update(workflow.id, {"status": "inactive"})

        with pytest.raises(ConflictError):
            await service.run(workflow.id, "+61400000001")
        assert bridge.requests == []

    async def test_bridge_failure_propagates(self, service, bridge, workflow):
        bridge.routes[("POST", "/api/campaigns/trigger-vapi-call")] = httpx.Response(502, json={"error": "down"})

        with pytest.raises(WorkflowApiError):
            await service.run(workflow.id, "+61400000001")


class TestStarts:
    async def test_call_handling(self, service, bridge, company):
        execution = await service.start_call_handling(
            CallHandlingStart(company_id=company.id, call_id="12", call_sid="CA12", customer_number="+61400000002")
        )

        assert bridge.paths() == ["/api/workflows/call-handling/start"]
        assert bridge.body() == {
            "callId": "12",
            "callSid": "CA12",
            "customerNumber": "+61400000002",
            "direction": "inbound",
        }
        assert execution.workflow_id == "call-handling-1"
        assert execution.run_id == "run-1"
        assert execution.status == "RUNNING"
        assert json.loads(execution.input_payload)["callSid"] == "CA12"

    async def test_lead_processing(self, service, bridge, company):
        execution = await service.start_lead_processing(
            LeadProcessingStart(company_id=company.id, campaign_id="spring", ai_agent_id="3", batch_size=25)
        )

        body = bridge.body()
        assert body["companyId"] == str(company.id)
        assert body["campaignId"] == "spring"
        assert body["batchSize"] == 25
        assert execution.workflow_type == "lead-processing"

    async def test_integration_sync_covers_syncable_integrations(self, session, service, bridge, company):
        salesforce = Integration(
            company_id=company.id,
            provider="salesforce",
            name="Salesforce",
            status="connected",
            credentials='{"token": "secret"}',
        )
        session.add_all(
            [
                salesforce,
                Integration(company_id=company.id, provider="email", name="Email", status="connected"),
                Integration(company_id=company.id, provider="hubspot", name="HubSpot"),
            ]
        )
        await session.commit()
        session.add_all(
            [
                FieldMapping(integration_id=salesforce.id, local_field="a", remote_object="Task", remote_field="x"),
                FieldMapping(integration_id=salesforce.id, local_field="b", remote_object="Lead", remote_field="y"),
                FieldMapping(
                    integration_id=salesforce.id,
                    local_field="c",
                    remote_object="Case",
                    remote_field="z",
                    enabled=False,
                ),
            ]
        )
        await session.commit()

        execution = await service.start_integration_sync(company.id, 30)

        body = bridge.body()
        assert body["syncIntervalMinutes"] == 30
        assert body["integrations"] == [
            {
                "id": str(salesforce.id),
                "type": "salesforce",
                "credentials": {"token": "secret"},
                "syncDirection": "bidirectional",
                "syncEntities": ["Lead", "Task"],
            }
        ]
        stored = json.loads(execution.input_payload)
        assert "credentials" not in stored["integrations"][0]
        assert "secret" not in execution.input_payload

    async def test_integration_sync_needs_connected_integration(self, session, service, bridge, company):
        session.add(Integration(company_id=company.id, provider="custom", name="Custom", status="connected"))
        await session.commit()

        with pytest.raises(ConflictError):
            await service.start_integration_sync(company.id)
        assert bridge.requests == []


class TestExecutions:
    async def test_refresh_copies_terminal_status(self, session, service, bridge, company):
        execution = await _execution(session, company)
        bridge.workflow_status = "COMPLETED"

        refreshed = await service.get_execution(execution.id)

        assert refreshed.status == "COMPLETED"
        assert refreshed.completed_at == datetime(2026, 10, 18, 10, 0, 0)
        assert bridge.paths() == ["/api/workflows/call-handling-9/status"]

    async def test_refresh_unchanged_status(self, session, service, company):
        execution = await _execution(session, company)

        refreshed = await service.get_execution(execution.id)

        assert refreshed.status == "RUNNING"
        assert refreshed.completed_at is None

    async def test_refresh_skips_finished_and_vapi_calls(self, session, service, bridge, company):
        finished = await _execution(session, company, workflow_id="wf-done", status="FAILED")
        vapi = await _execution(session, company, workflow_type="vapi-call", workflow_id="vapi-call-7")

        await service.get_execution(finished.id)
        await service.get_execution(vapi.id)
        await service.get_execution(finished.id, refresh=False)

        assert bridge.requests == []

    async def test_refresh_tolerates_bridge_failure(self, session, service, bridge, company):
        execution = await _execution(session, company)
        bridge.routes[("GET", "/api/workflows/call-handling-9/status")] = httpx.Response(500, json={"error": "boom"})

        refreshed = await service.get_execution(execution.id)

        assert refreshed.status == "RUNNING"

    async def test_missing_execution(self, service):
        with pytest.raises(NotFoundError):
            await service.get_execution(77)

    async def test_list_executions_filters(self, session, service, company):
        await _execution(session, company)
        await _execution(session, company, workflow_type="lead-processing", workflow_id="lead-1")

        leads = await service.list_executions(company_id=company.id, workflow_type="lead-processing")

        assert [e.workflow_id for e in leads] == ["lead-1"]
        assert len(await service.list_executions(company_id=company.id)) == 2

    async def test_list_live(self, service, bridge, company):
        bridge.routes[("GET", "/api/workflows")] = httpx.Response(
            200, json=[{"workflowId": "lead-1", "status": "RUNNING", "workflowType": "lead-processing"}]
        )

        live = await service.list_live(company.id, "lead-processing")

        assert [w.workflow_id for w in live] == ["lead-1"]
        params = bridge.requests[-1].url.params
        assert params["companyId"] == str(company.id)
        assert params["workflowType"] == "lead-processing"

    async def test_list_live_raises_bridge_error(self, service, bridge, company):
        bridge.routes[("GET", "/api/workflows")] = httpx.Response(503, json={"message": "maintenance"})

        with pytest.raises(WorkflowApiError, match="maintenance"):
            await service.list_live(company.id)


class TestStateAndSignals:
    async def test_state_by_type(self, session, service, company):
        call = await _execution(session, company)
        lead = await _execution(session, company, workflow_type="lead-processing", workflow_id="lead-1")
        sync = await _execution(session, company, workflow_type="integration-sync", workflow_id="sync-1")

        assert isinstance(await service.get_state(call), CallState)
        campaign_state = await service.get_state(lead)
        assert isinstance(campaign_state, CampaignState)
        assert campaign_state.processed_leads == 2
        assert isinstance(await service.get_state(sync), IntegrationSyncState)

    async def test_vapi_call_has_no_state(self, session, service, company):
        execution = await _execution(session, company, workflow_type="vapi-call", workflow_id="vapi-call-7")

        with pytest.raises(InvalidRequestError):
            await service.get_state(execution)

    async def test_handoff_returns_refreshed_state(self, session, service, bridge, company):
        execution = await _execution(session, company)

        state = await service.signal(execution, "human-handoff", SignalRequest())

        assert isinstance(state, CallState)
        assert bridge.paths() == [
            "/api/workflows/call-handling/call-handling-9/signal/human-handoff",
            "/api/workflows/call-handling/call-handling-9/query/state",
        ]
        assert bridge.body(0) == {"reason": "Requested by operator"}

    async def test_human_accepted_requires_agent(self, session, service, bridge, company):
        execution = await _execution(session, company)

        with pytest.raises(InvalidRequestError):
            await service.signal(execution, "human-accepted", SignalRequest())

        await service.signal(execution, "human-accepted", SignalRequest(agent_id="agent-4"))
        assert bridge.body(0) == {"agentId": "agent-4"}

    async def test_transcript_signal_skips_state_query(self, session, service, bridge, company):
        execution = await _execution(session, company)

        with pytest.raises(InvalidRequestError):
            await service.signal(execution, "transcript", SignalRequest(speaker="customer"))

        result = await service.signal(execution, "transcript", SignalRequest(speaker="customer", text="Hi"))

        assert result is None
        assert bridge.paths() == ["/api/workflows/call-handling/call-handling-9/signal/transcript"]

    async def test_campaign_pause(self, session, service, bridge, company):
        execution = await _execution(session, company, workflow_type="lead-processing", workflow_id="lead-1")

        state = await service.signal(execution, "pause", SignalRequest())

        assert isinstance(state, CampaignState)
        assert bridge.paths()[0] == "/api/workflows/lead-processing/lead-1/signal/pause"

    async def test_sync_now_passes_integration(self, session, service, bridge, company):
        execution = await _execution(session, company, workflow_type="integration-sync", workflow_id="sync-1")

        await service.signal(execution, "sync-now", SignalRequest(integration_id="5"))

        assert bridge.paths()[0] == "/api/workflows/integration-sync/sync-1/signal/sync-now"
        assert bridge.body(0) == {"integrationId": "5"}

    async def test_state_refresh_failure_after_signal(self, session, service, bridge, company):
        execution = await _execution(session, company)
        bridge.routes[("GET", "/api/workflows/call-handling/call-handling-9/query/state")] = httpx.Response(500)

        assert await service.signal(execution, "call-ended", SignalRequest()) is None

    @pytest.mark.parametrize(
        "workflow_type, signal",
        [("call-handling", "pause"), ("lead-processing", "sync-now"), ("vapi-call", "call-ended")],
    )
    async def test_unsupported_signal(self, session, service, bridge, company, workflow_type, signal):
        execution = await _execution(session, company, workflow_type=workflow_type, workflow_id="wf-x")

        with pytest.raises(InvalidRequestError):
            await service.signal(execution, signal, SignalRequest())
        assert bridge.requests == []

    async def test_terminate_and_history(self, session, service, bridge, company):
        execution = await _execution(session, company)

        terminated = await service.terminate(execution)
        history = await service.history(execution)

        assert terminated.status == "TERMINATED"
        assert terminated.completed_at is not None
        assert bridge.body(0) == {"reason": "Terminated by operator"}
        assert history == [{"eventId": 1, "eventType": "WorkflowExecutionStarted"}]
