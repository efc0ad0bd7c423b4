"""
Workflow repositories.

Data access for workflow definitions and the executions started on the
orchestration bridge.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lyriq.core.models.domain.enums import WorkflowExecutionStatus

from ..entities.workflows import Workflow, WorkflowExecution
from .base import SQLModelRepository


class WorkflowRepository(SQLModelRepository[Workflow]):
    """Repository for workflow definitions, newest edits first."""

    default_order = "updated_at"
    default_order_desc = True

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Workflow)


class WorkflowExecutionRepository(SQLModelRepository[WorkflowExecution]):
    """Repository for workflow executions."""

    default_order = "started_at"
    default_order_desc = True

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, WorkflowExecution)

    async def get_by_workflow_id(self, workflow_id: str) -> Optional[WorkflowExecution]:
        result = await self.session.execute(
            select(WorkflowExecution).where(WorkflowExecution.workflow_id == workflow_id)
        )
        return result.scalar_one_or_none()

    async def latest_running(self, company_id: int, workflow_type: str) -> Optional[WorkflowExecution]:
        """Most recently started RUNNING execution of a type for a company."""
        stmt = (
            select(WorkflowExecution)
            .where(WorkflowExecution.company_id == company_id)
            .where(WorkflowExecution.workflow_type == workflow_type)
            .where(WorkflowExecution.status == WorkflowExecutionStatus.RUNNING.value)
            .order_by(WorkflowExecution.started_at.desc(), WorkflowExecution.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
