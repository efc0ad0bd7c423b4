"""Dashboard aggregates."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database.repositories import (
    AIAgentRepository,
    CallRepository,
    ChatSessionRepository,
    HumanAgentRepository,
    KnowledgeBaseRepository,
    WorkflowRepository,
)
from lyriq.core.models.domain.enums import (
    ACTIVE_CALL_STATUSES,
    AgentStatus,
    CallDirection,
    CallStatus,
    ChatSessionStatus,
    HumanAgentStatus,
    WorkflowStatus,
)
from lyriq.core.models.io.dashboard import (
    CallCounts,
    ChatCounts,
    CountPair,
    DashboardOverview,
    HumanAgentCounts,
    HumanAgentStats,
)

from .errors import NotFoundError


class DashboardService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.ai_agents = AIAgentRepository(session)
        self.human_agents = HumanAgentRepository(session)
        self.workflows = WorkflowRepository(session)
        self.calls = CallRepository(session)
        self.chat_sessions = ChatSessionRepository(session)
        self.knowledge = KnowledgeBaseRepository(session)

    async def _call_counts(self, company_id: int) -> CallCounts:
        scope = {"company_id": company_id}
        active = await self.calls.list_by_status(company_id, ACTIVE_CALL_STATUSES)
        return CallCounts(
            total=await self.calls.count(scope),
            inbound=await self.calls.count({**scope, "direction": CallDirection.inbound.value}),
            outbound=await self.calls.count({**scope, "direction": CallDirection.outbound.value}),
            active=len(active),
            completed=await self.calls.count({**scope, "status": CallStatus.completed.value}),
            failed=await self.calls.count({**scope, "status": CallStatus.failed.value}),
            average_duration_seconds=await self.calls.average_duration_seconds(company_id),
        )

    async def overview(self, company_id: int) -> DashboardOverview:
        scope = {"company_id": company_id}
        return DashboardOverview(
            company_id=company_id,
            ai_agents=CountPair(
                total=await self.ai_agents.count(scope),
                active=await self.ai_agents.count({**scope, "status": AgentStatus.active.value}),
            ),
            human_agents=HumanAgentCounts(
                total=await self.human_agents.count(scope),
                online=await self.human_agents.count({**scope, "status": HumanAgentStatus.online.value}),
            ),
            workflows=CountPair(
                total=await self.workflows.count(scope),
                active=await self.workflows.count({**scope, "status": WorkflowStatus.active.value}),
            ),
            calls=await self._call_counts(company_id),
            chat_sessions=ChatCounts(
                total=await self.chat_sessions.count(scope),
                escalated=await self.chat_sessions.count({**scope, "status": ChatSessionStatus.escalated.value}),
            ),
            knowledge_entries=await self.knowledge.count(scope),
        )

    async def human_agent_stats(self, agent_id: int) -> HumanAgentStats:
        """Calls routed to a human agent, in total and currently live."""
        if await self.human_agents.get_by_id(agent_id) is None:
            raise NotFoundError("Human agent", agent_id)
        active = await self.calls.list_by_status(None, ACTIVE_CALL_STATUSES, agent_id=agent_id)
        return HumanAgentStats(
            agent_id=agent_id,
            calls_handled=await self.calls.count({"agent_id": agent_id}),
            calls_active=len(active),
        )
