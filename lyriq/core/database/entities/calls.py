"""
Call entity models.

This module contains the call record (one row per phone call, inbound or
outbound, whichever voice platform carried it) and the transcript lines
captured during the call.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from lyriq.core.models.domain.enums import CallDirection, CallStatus

from ..base import Base, utc_now


class CallBase(Base):
    """Base fields for a call."""

    company_id: Optional[int] = Field(default=None, foreign_key="companies.id", index=True)
    customer_number: Optional[str] = Field(default=None, index=True, description="Caller or callee number")
    customer_name: Optional[str] = Field(default=None)
    direction: str = Field(default=CallDirection.inbound.value, description="inbound or outbound")
    status: str = Field(default=CallStatus.queued.value, index=True)

    ai_agent_id: Optional[int] = Field(default=None, foreign_key="ai_agents.id", index=True)
    agent_id: Optional[int] = Field(
        default=None, foreign_key="human_agents.id", index=True, description="Human agent handling the call"
    )
    customer_profile_id: Optional[int] = Field(default=None, foreign_key="customer_profiles.id")
    workflow_id: Optional[int] = Field(default=None, foreign_key="workflows.id")

    twilio_call_sid: Optional[str] = Field(default=None, unique=True, index=True)
    vapi_call_id: Optional[str] = Field(default=None, index=True)

    summary: Optional[str] = Field(default=None)
    outcome: Optional[str] = Field(default=None)
    recording_url: Optional[str] = Field(default=None)


class Call(CallBase, table=True):
    """Persistent call record.

    Table: calls
    """

    __tablename__ = "calls"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    started_at: Optional[datetime] = Field(default=None)
    ended_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def duration_seconds(self) -> Optional[int]:
        if self.started_at is None or self.ended_at is None:
            return None
        return round((self.ended_at - self.started_at).total_seconds())

    def __repr__(self) -> str:
        return f"Call(id={self.id}, direction={self.direction}, status={self.status})"


class CallTranscriptLine(Base, table=True):
    """A single utterance in a call transcript.

    Table: call_transcripts
    """

    __tablename__ = "call_transcripts"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    call_id: int = Field(foreign_key="calls.id", index=True)
    speaker: str = Field(description="customer, ai or agent")
    text: str = Field(description="Utterance text")
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"CallTranscriptLine(id={self.id}, call_id={self.call_id}, speaker={self.speaker})"
