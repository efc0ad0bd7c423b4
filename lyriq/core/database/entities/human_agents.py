"""
Human agent entity models.

Human agents receive transferred calls and take over escalated chats.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from lyriq.core.models.domain.enums import HumanAgentStatus

from ..base import Base, load_json_list, utc_now

HUMAN_AGENT_JSON_FIELDS = ("skills",)


class HumanAgentBase(Base):
    """Base fields for a human agent."""

    company_id: int = Field(foreign_key="companies.id", index=True)
    user_id: Optional[str] = Field(default=None, index=True, description="Identity of the agent's login")
    name: str = Field(description="Agent full name")
    email: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    status: str = Field(default=HumanAgentStatus.offline.value, index=True, description="online, offline, busy, away")
    skills: str = Field(default="[]", description="JSON array of skill tags")
    max_concurrent_calls: int = Field(default=1, ge=1)


class HumanAgent(HumanAgentBase, table=True):
    """Persistent human agent record.

    Table: human_agents
    """

    __tablename__ = "human_agents"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    last_status_change_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_skills_list(self) -> List[str]:
        return load_json_list(self.skills)

    def __repr__(self) -> str:
        return f"HumanAgent(id={self.id}, name={self.name}, status={self.status})"
