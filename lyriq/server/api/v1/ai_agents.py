"""
API endpoints for managing AI voice agents.

Provides CRUD operations for AI agent configurations, plus duplication,
activation toggling and per-agent call analytics. Catalog-backed fields
(voice, tools, end-of-call actions, integrations) are validated on write.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from lyriq.core.database.base import encode_json_fields
from lyriq.core.database.entities.ai_agents import AI_AGENT_JSON_FIELDS, AIAgent
from lyriq.core.database.repositories import AIAgentRepository, CallRepository, CompanyRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import (
    FINISHED_CALL_STATUSES,
    AgentStatus,
    CallDirection,
    CallStatus,
)
from lyriq.core.models.io.ai_agents import AIAgentAnalytics, AIAgentCreate, AIAgentRead, AIAgentUpdate
from lyriq.server.services.catalog import validate_agent_selection
from lyriq.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()

_COPIED_FIELDS = set(AIAgentCreate.model_fields) - {"name", "status"}


async def _get_agent(repo: AIAgentRepository, agent_id: int) -> AIAgent:
    agent = await repo.get_by_id(agent_id)
    if not agent:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"AI agent {agent_id} not found")
    return agent


@router.post(
    "",
    response_model=AIAgentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create AI Agent",
    description="Create an AI voice agent for a company. New agents start inactive unless a status is given.",
    response_description="The created AI agent.",
    responses={
        201: {"description": "AI agent created successfully"},
        400: {"description": "Unknown voice, tool, action or integration id"},
        404: {"description": "Company not found"},
    },
)
async def create_ai_agent(data: AIAgentCreate, session: SessionDep) -> AIAgentRead:
    """
    Create an AI agent.

    - **company_id**: Owning company.
    - **voice_provider** / **voice_id**: Must be a voice offered by the provider.
    - **tools**, **end_of_call_actions**, **integrations**: Ids from the catalogs.
    - **knowledge_collections**: Knowledge base collections the agent may consult.
    """
    payload = data.model_dump()
    validate_agent_selection(payload)
    if not await CompanyRepository(session).get_by_id(data.company_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Company {data.company_id} not found")
    agent = await AIAgentRepository(session).create(AIAgent(**encode_json_fields(payload, AI_AGENT_JSON_FIELDS)))
    logger.info(f"Created AI agent {agent.id} ({agent.name}) for company {agent.company_id}")
    return AIAgentRead.model_validate(agent)


@router.get(
    "",
    response_model=List[AIAgentRead],
    summary="List AI Agents",
    description="List AI agents, newest first, optionally filtered by company and status.",
)
async def list_ai_agents(
    session: SessionDep,
    company_id: Optional[int] = None,
    agent_status: Optional[AgentStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[AIAgentRead]:
    """
    List AI agents.

    - **company_id**: Only agents of this company.
    - **agent_status**: Only active or only inactive agents.
    """
    agents = await AIAgentRepository(session).list(
        limit=limit,
        offset=offset,
        filters={"company_id": company_id, "status": agent_status.value if agent_status else None},
    )
    return [AIAgentRead.model_validate(a) for a in agents]


@router.get(
    "/{agent_id}",
    response_model=AIAgentRead,
    summary="Get AI Agent",
    responses={404: {"description": "AI agent not found"}},
)
async def get_ai_agent(agent_id: int, session: SessionDep) -> AIAgentRead:
    return AIAgentRead.model_validate(await _get_agent(AIAgentRepository(session), agent_id))


@router.patch(
    "/{agent_id}",
    response_model=AIAgentRead,
    summary="Update AI Agent",
    description="Update the provided fields of an AI agent.",
    responses={
        400: {"description": "Unknown voice, tool, action or integration id"},
        404: {"description": "AI agent not found"},
    },
)
async def update_ai_agent(agent_id: int, data: AIAgentUpdate, session: SessionDep) -> AIAgentRead:
    """
    Update an AI agent.

    Changing only **voice_id** is checked against the agent's current provider;
    changing only **voice_provider** requires the current voice to exist there too.
    """
    repo = AIAgentRepository(session)
    agent = await _get_agent(repo, agent_id)
    changes = data.model_dump(exclude_unset=True)
    effective = dict(changes)
    if "voice_provider" in changes or "voice_id" in changes:
        effective["voice_provider"] = changes.get("voice_provider") or agent.voice_provider
        effective["voice_id"] = changes.get("voice_id") or agent.voice_id
    validate_agent_selection(effective)
    for key, value in encode_json_fields(changes, AI_AGENT_JSON_FIELDS).items():
        setattr(agent, key, value)
    agent = await repo.update(agent)
    return AIAgentRead.model_validate(agent)


@router.delete(
    "/{agent_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete AI Agent",
    responses={404: {"description": "AI agent not found"}},
)
async def delete_ai_agent(agent_id: int, session: SessionDep) -> None:
    if not await AIAgentRepository(session).delete(agent_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"AI agent {agent_id} not found")
    logger.info(f"Deleted AI agent {agent_id}")


@router.post(
    "/{agent_id}/duplicate",
    response_model=AIAgentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate AI Agent",
    description="Copy an AI agent's configuration into a new, inactive agent named '<name> (Copy)'.",
    responses={404: {"description": "AI agent not found"}},
)
async def duplicate_ai_agent(agent_id: int, session: SessionDep) -> AIAgentRead:
    """
    Duplicate an AI agent.

    The copy has no call history, so its analytics start at zero. The phone number
    and voice platform assistant are not copied since they identify the original.
    """
    repo = AIAgentRepository(session)
    original = await _get_agent(repo, agent_id)
    fields = {key: getattr(original, key) for key in _COPIED_FIELDS}
    fields.update(phone_number=None, vapi_assistant_id=None)
    copy = await repo.create(AIAgent(**fields, name=f"{original.name} (Copy)", status=AgentStatus.inactive.value))
    logger.info(f"Duplicated AI agent {agent_id} as {copy.id}")
    return AIAgentRead.model_validate(copy)


@router.post(
    "/{agent_id}/toggle-status",
    response_model=AIAgentRead,
    summary="Toggle AI Agent Status",
    description="Switch an AI agent between active and inactive.",
    responses={404: {"description": "AI agent not found"}},
)
async def toggle_ai_agent_status(agent_id: int, session: SessionDep) -> AIAgentRead:
    repo = AIAgentRepository(session)
    agent = await _get_agent(repo, agent_id)
    agent.status = (
        AgentStatus.inactive.value if agent.status == AgentStatus.active.value else AgentStatus.active.value
    )
    agent = await repo.update(agent)
    logger.info(f"AI agent {agent_id} is now {agent.status}")
    return AIAgentRead.model_validate(agent)


@router.get(
    "/{agent_id}/analytics",
    response_model=AIAgentAnalytics,
    summary="Get AI Agent Analytics",
    description="Call counts of an AI agent and the share of its finished calls that completed.",
    responses={404: {"description": "AI agent not found"}},
)
async def get_ai_agent_analytics(agent_id: int, session: SessionDep) -> AIAgentAnalytics:
    """
    Get AI agent analytics.

    **success_rate** is the percentage of finished calls (completed, failed, busy,
    no-answer, canceled) that completed, rounded to one decimal; 0 without
    finished calls.
    """
    await _get_agent(AIAgentRepository(session), agent_id)
    calls = CallRepository(session)
    scope = {"ai_agent_id": agent_id}
    completed = await calls.count({**scope, "status": CallStatus.completed.value})
    finished = len(await calls.list_by_status(None, FINISHED_CALL_STATUSES, ai_agent_id=agent_id))
    return AIAgentAnalytics(
        agent_id=agent_id,
        total_calls=await calls.count(scope),
        inbound_calls=await calls.count({**scope, "direction": CallDirection.inbound.value}),
        outbound_calls=await calls.count({**scope, "direction": CallDirection.outbound.value}),
        completed_calls=completed,
        failed_calls=await calls.count({**scope, "status": CallStatus.failed.value}),
        success_rate=round(completed / finished * 100, 1) if finished else 0.0,
    )
