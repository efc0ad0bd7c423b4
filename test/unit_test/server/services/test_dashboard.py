"""Unit tests for DashboardService."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from lyriq.core.database.entities import (
    AIAgent,
    Call,
    ChatSession,
    HumanAgent,
    KnowledgeBaseEntry,
    Workflow,
)
from lyriq.server.services.dashboard import DashboardService
from lyriq.server.services.errors import NotFoundError


@pytest.fixture
def service(session):
    return DashboardService(session)


class TestOverview:
    async def test_empty_company(self, service, company):
        overview = await service.overview(company.id)

        assert overview.company_id == company.id
        assert overview.calls.total == 0
        assert overview.calls.average_duration_seconds is None
        assert overview.knowledge_entries == 0

    async def test_counts(self, session, service, company):
        start = datetime(2026, 10, 18, 9, 0, 0)
        session.add_all(
            [
                AIAgent(company_id=company.id, name="Ava", status="active"),
                AIAgent(company_id=company.id, name="Max"),
                HumanAgent(company_id=company.id, name="Mia", status="online"),
                HumanAgent(company_id=company.id, name="Leo", status="busy"),
                Workflow(company_id=company.id, name="Renewals"),
                Workflow(company_id=company.id, name="Winback", status="inactive"),
                Call(company_id=company.id, status="in-progress"),
                Call(company_id=company.id, status="queued", direction="outbound"),
                Call(
                    company_id=company.id,
                    status="completed",
                    started_at=start,
                    ended_at=start + timedelta(seconds=120),
                ),
                Call(company_id=company.id, status="failed", direction="outbound"),
                ChatSession(company_id=company.id),
                ChatSession(company_id=company.id, status="escalated"),
                KnowledgeBaseEntry(company_id=company.id, title="Hours", content="9 to 5"),
                # Another company's records are not counted
                AIAgent(company_id=company.id + 1, name="Other", status="active"),
                Call(company_id=company.id + 1, status="in-progress"),
            ]
        )
        await session.commit()

        overview = await service.overview(company.id)

        assert overview.ai_agents.model_dump() == {"total": 2, "active": 1}
        assert overview.human_agents.model_dump() == {"total": 2, "online": 1}
        assert overview.workflows.model_dump() == {"total": 2, "active": 1}
        assert overview.calls.model_dump() == {
            "total": 4,
            "inbound": 2,
            "outbound": 2,
            "active": 2,
            "completed": 1,
            "failed": 1,
            "average_duration_seconds": 120.0,
        }
        assert overview.chat_sessions.model_dump() == {"total": 2, "escalated": 1}
        assert overview.knowledge_entries == 1


class TestHumanAgentStats:
    async def test_counts_routed_calls(self, session, service, company):
        agent = HumanAgent(company_id=company.id, name="Mia", status="online")
        session.add(agent)
        await session.commit()
        session.add_all(
            [
                Call(company_id=company.id, agent_id=agent.id, status="in-progress"),
                Call(company_id=company.id, agent_id=agent.id, status="completed"),
                Call(company_id=company.id, status="in-progress"),
            ]
        )
        await session.commit()

        stats = await service.human_agent_stats(agent.id)

        assert (stats.calls_handled, stats.calls_active) == (2, 1)

    async def test_unknown_agent(self, service):
        with pytest.raises(NotFoundError):
            await service.human_agent_stats(31)
