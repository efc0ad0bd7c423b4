"""
AI agent entity models.

An AI agent is a configured voice/chat assistant: its voice, prompts, the
tools it may call, what happens after a call ends, which knowledge
collections it reads and which integrations it writes to.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from lyriq.core.models.domain.enums import AgentStatus

from ..base import Base, load_json_list, utc_now

AI_AGENT_JSON_FIELDS = (
    "tools",
    "end_of_call_actions",
    "knowledge_collections",
    "integrations",
    "transfer_conditions",
)

DEFAULT_FIRST_MESSAGE = "Hello! Thank you for calling. How can I assist you today?"

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant for our company.\n"
    "Your role is to assist customers with their inquiries professionally and efficiently.\n"
    "Always be polite, clear, and helpful.\n"
    "If you cannot resolve an issue, offer to transfer to a human agent."
)


class AIAgentBase(Base):
    """Base fields for an AI agent."""

    company_id: int = Field(foreign_key="companies.id", index=True)
    name: str = Field(description="Agent display name")
    description: Optional[str] = Field(default=None)
    avatar: Optional[str] = Field(default=None, description="Avatar image URL")
    status: str = Field(default=AgentStatus.inactive.value, description="active or inactive")
    phone_number: Optional[str] = Field(default=None, description="Number the agent answers")

    # Voice
    voice_provider: str = Field(default="elevenlabs", description="elevenlabs, openai or azure")
    voice_id: str = Field(default="Rachel", description="Voice offered by the provider")
    personality_friendly: int = Field(default=70, ge=0, le=100)
    personality_professional: int = Field(default=80, ge=0, le=100)

    # Conversation
    first_message: str = Field(default=DEFAULT_FIRST_MESSAGE)
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)

    # Capabilities (JSON arrays)
    tools: str = Field(default='["transfer", "order-status"]', description="JSON array of tool ids")
    end_of_call_actions: str = Field(default='["summary-crm"]', description="JSON array of action ids")
    knowledge_collections: str = Field(default='["products", "faq"]', description="JSON array of collection ids")
    integrations: str = Field(default="[]", description="JSON array of integration ids")

    # Human transfer
    transfer_enabled: bool = Field(default=True)
    transfer_number: Optional[str] = Field(default=None)
    transfer_conditions: str = Field(default="[]", description="JSON array of free-text conditions")

    vapi_assistant_id: Optional[str] = Field(default=None, description="Assistant id on the voice platform")


class AIAgent(AIAgentBase, table=True):
    """Persistent AI agent configuration.

    Call counters are derived from the calls table; see the analytics endpoint.

    Table: ai_agents
    """

    __tablename__ = "ai_agents"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_tools_list(self) -> List[str]:
        return load_json_list(self.tools)

    def get_end_of_call_actions_list(self) -> List[str]:
        return load_json_list(self.end_of_call_actions)

    def get_knowledge_collections_list(self) -> List[str]:
        return load_json_list(self.knowledge_collections)

    def get_integrations_list(self) -> List[str]:
        return load_json_list(self.integrations)

    def __repr__(self) -> str:
        return f"AIAgent(id={self.id}, name={self.name}, status={self.status})"
