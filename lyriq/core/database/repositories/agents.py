"""
AI and human agent repositories.

This module provides data access for AI agent configurations and for the
human agents that receive transfers.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lyriq.core.models.domain.enums import HumanAgentStatus

from ..base import utc_now
from ..entities.ai_agents import AIAgent
from ..entities.human_agents import HumanAgent
from .base import SQLModelRepository


class AIAgentRepository(SQLModelRepository[AIAgent]):
    """Repository for AI agent configuration records."""

    default_order = "created_at"
    default_order_desc = True

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AIAgent)

    async def get_by_phone_number(self, phone_number: str) -> Optional[AIAgent]:
        result = await self.session.execute(select(AIAgent).where(AIAgent.phone_number == phone_number))
        return result.scalars().first()


class HumanAgentRepository(SQLModelRepository[HumanAgent]):
    """Repository for human agent records."""

    default_order = "name"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, HumanAgent)

    async def first_online(self, company_id: Optional[int] = None) -> Optional[HumanAgent]:
        """Return the longest-registered online agent, optionally within one company.

        Args:
            company_id: Restrict the search to this company

        Returns:
            The first online HumanAgent, or None when everybody is offline or busy
        """
        stmt = select(HumanAgent).where(HumanAgent.status == HumanAgentStatus.online.value)
        if company_id is not None:
            stmt = stmt.where(HumanAgent.company_id == company_id)
        stmt = stmt.order_by(HumanAgent.id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def set_status(self, agent: HumanAgent, status: HumanAgentStatus) -> HumanAgent:
        agent.status = status.value
        agent.last_status_change_at = utc_now()
        return await self.update(agent)
