"""
Chat I/O models for API requests and responses.

This module contains the schemas for chat sessions, their messages, and the
chatbot reply returned by the RAG answering endpoint.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from lyriq.core.models.domain.enums import ChatSessionStatus, MessageSender

from ._json_fields import decode_json_dict


class ChatSessionCreate(BaseModel):
    """Schema for opening a chat session."""

    company_id: int
    user_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class ChatSessionRead(BaseModel):
    """Schema for reading a chat session from API."""

    id: int
    company_id: int
    user_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    status: ChatSessionStatus
    agent_id: Optional[int] = None
    escalation_reason: Optional[str] = None
    escalated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ChatMessageRead(BaseModel):
    """Schema for reading a chat message from API."""

    id: int
    session_id: int
    sender_type: MessageSender
    sender_id: Optional[str] = None
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="message_metadata")
    created_at: datetime

    _decode_metadata = field_validator("metadata", mode="before")(decode_json_dict)

    class Config:
        from_attributes = True


class ChatRequest(BaseModel):
    """A customer message to be answered by the chatbot."""

    message: str = Field(description="Customer message")
    user_id: Optional[str] = Field(default=None, description="Signed-in customer, used for personal context")
    is_handover_response: bool = Field(
        default=False, description="True when the session was just handed back to the AI"
    )


class ContextUsage(BaseModel):
    knowledge_base: int = 0
    user_context: Literal["yes", "no"] = "no"


class ChatResponse(BaseModel):
    """Chatbot reply."""

    message: str
    needs_escalation: bool = False
    human_takeover: bool = False
    context_used: Optional[ContextUsage] = None


class AgentMessageCreate(BaseModel):
    """A message written by the human agent handling the session."""

    agent_id: int
    content: str = Field(min_length=1)


class EscalateRequest(BaseModel):
    reason: Optional[str] = None


class AssignRequest(BaseModel):
    agent_id: int
