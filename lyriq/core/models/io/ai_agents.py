"""
AI agent I/O models for API requests and responses.

This module contains Pydantic-based I/O schemas for the AI agent endpoints.
List-valued settings travel as JSON arrays and are validated against the
static catalogs by the API layer.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lyriq.core.database.entities.ai_agents import DEFAULT_FIRST_MESSAGE, DEFAULT_SYSTEM_PROMPT
from lyriq.core.models.domain.enums import AgentStatus

from ._json_fields import decode_json_list


class AIAgentRead(BaseModel):
    """Schema for reading an AI agent from API."""

    id: int
    company_id: int
    name: str
    description: Optional[str] = None
    avatar: Optional[str] = None
    status: AgentStatus
    phone_number: Optional[str] = None
    voice_provider: str
    voice_id: str
    personality_friendly: int
    personality_professional: int
    first_message: str
    system_prompt: str
    tools: List[str] = Field(description="Tool ids the agent may invoke")
    end_of_call_actions: List[str]
    knowledge_collections: List[str]
    integrations: List[str]
    transfer_enabled: bool
    transfer_number: Optional[str] = None
    transfer_conditions: List[str]
    vapi_assistant_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    _decode_lists = field_validator(
        "tools", "end_of_call_actions", "knowledge_collections", "integrations", "transfer_conditions", mode="before"
    )(decode_json_list)

    class Config:
        from_attributes = True


class AIAgentCreate(BaseModel):
    """Schema for creating an AI agent via API."""

    model_config = ConfigDict(use_enum_values=True)

    company_id: int
    name: str = Field(min_length=1)
    description: Optional[str] = None
    avatar: Optional[str] = None
    status: AgentStatus = AgentStatus.inactive
    phone_number: Optional[str] = None
    voice_provider: str = Field(default="elevenlabs", description="elevenlabs, openai or azure")
    voice_id: str = Field(default="Rachel")
    personality_friendly: int = Field(default=70, ge=0, le=100)
    personality_professional: int = Field(default=80, ge=0, le=100)
    first_message: str = DEFAULT_FIRST_MESSAGE
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    tools: List[str] = Field(default_factory=lambda: ["transfer", "order-status"])
    end_of_call_actions: List[str] = Field(default_factory=lambda: ["summary-crm"])
    knowledge_collections: List[str] = Field(default_factory=lambda: ["products", "faq"])
    integrations: List[str] = Field(default_factory=list)
    transfer_enabled: bool = True
    transfer_number: Optional[str] = None
    transfer_conditions: List[str] = Field(default_factory=list)
    vapi_assistant_id: Optional[str] = None


class AIAgentUpdate(BaseModel):
    """Schema for updating an AI agent via API."""

    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = None
    description: Optional[str] = None
    avatar: Optional[str] = None
    status: Optional[AgentStatus] = None
    phone_number: Optional[str] = None
    voice_provider: Optional[str] = None
    voice_id: Optional[str] = None
    personality_friendly: Optional[int] = Field(default=None, ge=0, le=100)
    personality_professional: Optional[int] = Field(default=None, ge=0, le=100)
    first_message: Optional[str] = None
    system_prompt: Optional[str] = None
    tools: Optional[List[str]] = None
    end_of_call_actions: Optional[List[str]] = None
    knowledge_collections: Optional[List[str]] = None
    integrations: Optional[List[str]] = None
    transfer_enabled: Optional[bool] = None
    transfer_number: Optional[str] = None
    transfer_conditions: Optional[List[str]] = None
    vapi_assistant_id: Optional[str] = None


class AIAgentAnalytics(BaseModel):
    """Call statistics of one AI agent."""

    agent_id: int
    total_calls: int
    inbound_calls: int
    outbound_calls: int
    completed_calls: int
    failed_calls: int
    success_rate: float = Field(description="Completed share of finished calls, in percent")
