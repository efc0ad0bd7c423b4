"""Dashboard aggregate I/O models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class CountPair(BaseModel):
    total: int = 0
    active: int = 0


class HumanAgentCounts(BaseModel):
    total: int = 0
    online: int = 0


class CallCounts(BaseModel):
    total: int = 0
    inbound: int = 0
    outbound: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    average_duration_seconds: Optional[float] = None


class ChatCounts(BaseModel):
    total: int = 0
    escalated: int = 0


class DashboardOverview(BaseModel):
    """Headline numbers of one company."""

    company_id: int
    ai_agents: CountPair
    human_agents: HumanAgentCounts
    workflows: CountPair
    calls: CallCounts
    chat_sessions: ChatCounts
    knowledge_entries: int = 0


class HumanAgentStats(BaseModel):
    agent_id: int
    calls_handled: int
    calls_active: int
