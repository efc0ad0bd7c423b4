"""
Chat session entity models.

This module contains the database entities for website chat sessions and
their messages. A session is answered by the AI until it is escalated or a
human agent is assigned.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from lyriq.core.models.domain.enums import ChatSessionStatus

from ..base import Base, load_json_dict, utc_now


class ChatSessionBase(Base):
    """Base fields for chat session."""

    company_id: int = Field(foreign_key="companies.id", index=True)
    user_id: Optional[str] = Field(default=None, index=True, description="Signed-in customer, if any")
    customer_name: Optional[str] = Field(default=None)
    customer_email: Optional[str] = Field(default=None)
    status: str = Field(default=ChatSessionStatus.active.value, index=True, description="active, escalated, closed")
    agent_id: Optional[int] = Field(
        default=None, foreign_key="human_agents.id", index=True, description="Human agent who took over"
    )
    escalation_reason: Optional[str] = Field(default=None)


class ChatSession(ChatSessionBase, table=True):
    """Persistent chat session in database.

    Table: chat_sessions
    """

    __tablename__ = "chat_sessions"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    escalated_at: Optional[datetime] = Field(default=None)
    closed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_human_handled(self) -> bool:
        return self.status in (ChatSessionStatus.escalated.value, ChatSessionStatus.closed.value) or (
            self.agent_id is not None
        )

    def __repr__(self) -> str:
        return f"ChatSession(id={self.id}, status={self.status}, agent_id={self.agent_id})"


class ChatMessage(Base, table=True):
    """Individual message within a chat session.

    Table: chat_messages
    """

    __tablename__ = "chat_messages"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="chat_sessions.id", index=True)

    sender_type: str = Field(description="user, ai, agent or system")
    sender_id: Optional[str] = Field(default=None)
    content: str = Field(description="Message content")
    message_metadata: str = Field(default="{}", description="JSON object with answer provenance")

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def get_metadata(self) -> dict:
        return load_json_dict(self.message_metadata)

    def __repr__(self) -> str:
        return f"ChatMessage(id={self.id}, sender_type={self.sender_type}, session_id={self.session_id})"
