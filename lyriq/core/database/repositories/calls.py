"""
Call repository.

Data access for call records, their transcripts and the customer profiles
the voice webhook maintains.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.calls import Call, CallTranscriptLine
from ..entities.customer_profiles import CustomerProfile
from .base import QueryBuilder, SQLModelRepository


class CallRepository(SQLModelRepository[Call]):
    """Repository for call records and transcript lines."""

    default_order = "created_at"
    default_order_desc = True

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Call)

    async def get_by_twilio_sid(self, call_sid: str) -> Optional[Call]:
        result = await self.session.execute(select(Call).where(Call.twilio_call_sid == call_sid))
        return result.scalar_one_or_none()

    async def get_by_vapi_call_id(self, vapi_call_id: str) -> Optional[Call]:
        result = await self.session.execute(select(Call).where(Call.vapi_call_id == vapi_call_id))
        return result.scalars().first()

    async def list_by_status(
        self,
        company_id: Optional[int],
        statuses: tuple[str, ...],
        ai_agent_id: Optional[int] = None,
        agent_id: Optional[int] = None,
    ) -> List[Call]:
        stmt = select(Call).where(Call.status.in_(statuses))
        stmt = QueryBuilder.apply_filters(
            stmt, Call, {"company_id": company_id, "ai_agent_id": ai_agent_id, "agent_id": agent_id}
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def recent_for_customer(self, customer_profile_id: int, limit: int = 5) -> List[Call]:
        stmt = (
            select(Call)
            .where(Call.customer_profile_id == customer_profile_id)
            .order_by(Call.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def average_duration_seconds(self, company_id: Optional[int] = None) -> Optional[float]:
        """Average duration of calls that have both a start and an end time."""
        calls = await self.session.execute(
            QueryBuilder.apply_filters(
                select(Call).where(Call.started_at.is_not(None)).where(Call.ended_at.is_not(None)),
                Call,
                {"company_id": company_id},
            )
        )
        durations = [c.duration_seconds for c in calls.scalars().all() if c.duration_seconds is not None]
        if not durations:
            return None
        return round(sum(durations) / len(durations), 1)

    async def add_transcript_line(self, call_id: int, speaker: str, text: str) -> CallTranscriptLine:
        line = CallTranscriptLine(call_id=call_id, speaker=speaker, text=text)
        self.session.add(line)
        await self.session.commit()
        await self.session.refresh(line)
        return line

    async def list_transcript(self, call_id: int) -> List[CallTranscriptLine]:
        stmt = (
            select(CallTranscriptLine)
            .where(CallTranscriptLine.call_id == call_id)
            .order_by(CallTranscriptLine.created_at, CallTranscriptLine.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_transcript_lines(self, call_id: int) -> int:
        stmt = select(func.count()).select_from(CallTranscriptLine).where(CallTranscriptLine.call_id == call_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())


class CustomerProfileRepository(SQLModelRepository[CustomerProfile]):
    """Repository for customer profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CustomerProfile)

    async def get_by_phone(self, phone_number: str) -> Optional[CustomerProfile]:
        result = await self.session.execute(
            select(CustomerProfile).where(CustomerProfile.phone_number == phone_number)
        )
        return result.scalar_one_or_none()

    async def get_by_user_id(self, user_id: str) -> Optional[CustomerProfile]:
        result = await self.session.execute(select(CustomerProfile).where(CustomerProfile.user_id == user_id))
        return result.scalars().first()
