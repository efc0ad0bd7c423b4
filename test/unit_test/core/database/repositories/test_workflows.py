"""Unit tests for workflow and workflow execution repositories."""

from __future__ import annotations

from datetime import datetime, timedelta

from lyriq.core.database.entities import Workflow, WorkflowExecution
from lyriq.core.database.repositories import WorkflowExecutionRepository, WorkflowRepository


class TestWorkflowRepository:
    async def test_create_defaults(self, session, company):
        workflow = await WorkflowRepository(session).create(Workflow(company_id=company.id, name="Win-back"))

        assert workflow.status == "active"
        assert workflow.trigger_type == "temporal-outbound"
        assert workflow.get_actions_list() == []


class TestWorkflowExecutionRepository:
    async def test_get_by_workflow_id(self, session, company):
        repository = WorkflowExecutionRepository(session)
        execution = await repository.create(
            WorkflowExecution(company_id=company.id, workflow_type="call-handling", workflow_id="call-CA1")
        )

        assert (await repository.get_by_workflow_id("call-CA1")).id == execution.id
        assert await repository.get_by_workflow_id("call-CA2") is None
        assert execution.status == "RUNNING"
        assert execution.get_input_payload() == {}

    async def test_latest_running(self, session, company):
        repository = WorkflowExecutionRepository(session)
        base = datetime(2026, 7, 1, 9, 0, 0)
        await repository.create(
            WorkflowExecution(
                company_id=company.id, workflow_type="integration-sync", workflow_id="sync-1", started_at=base
            )
        )
        newest = await repository.create(
            WorkflowExecution(
                company_id=company.id,
                workflow_type="integration-sync",
                workflow_id="sync-2",
                started_at=base + timedelta(minutes=5),
            )
        )
        await repository.create(
            WorkflowExecution(
                company_id=company.id,
                workflow_type="integration-sync",
                workflow_id="sync-3",
                status="COMPLETED",
                started_at=base + timedelta(minutes=10),
            )
        )

        found = await repository.latest_running(company.id, "integration-sync")

        assert found.id == newest.id
        assert await repository.latest_running(company.id, "lead-processing") is None
