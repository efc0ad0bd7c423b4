"""
API endpoints for managing human agents.

Human agents receive inbound call transfers and take over escalated chats.
Their presence status decides who the voice webhook routes a ringing call to.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from lyriq.core.database.base import encode_json_fields
from lyriq.core.database.entities.human_agents import HUMAN_AGENT_JSON_FIELDS, HumanAgent
from lyriq.core.database.repositories import CompanyRepository, HumanAgentRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import HumanAgentStatus
from lyriq.core.models.io.dashboard import HumanAgentStats
from lyriq.core.models.io.human_agents import (
    HumanAgentCreate,
    HumanAgentRead,
    HumanAgentStatusUpdate,
    HumanAgentUpdate,
)
from lyriq.server.services.dashboard import DashboardService
from lyriq.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()


async def _get_agent(repo: HumanAgentRepository, agent_id: int) -> HumanAgent:
    agent = await repo.get_by_id(agent_id)
    if not agent:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Human agent {agent_id} not found")
    return agent


@router.post(
    "",
    response_model=HumanAgentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Human Agent",
    responses={404: {"description": "Company not found"}},
)
async def create_human_agent(data: HumanAgentCreate, session: SessionDep) -> HumanAgentRead:
    """
    Register a human agent.

    - **company_id**: Owning company.
    - **status**: online, offline, busy or away. Defaults to offline.
    - **skills**: Free-form skill tags.
    """
    if not await CompanyRepository(session).get_by_id(data.company_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Company {data.company_id} not found")
    agent = HumanAgent(**encode_json_fields(data.model_dump(), HUMAN_AGENT_JSON_FIELDS))
    agent = await HumanAgentRepository(session).create(agent)
    logger.info(f"Created human agent {agent.id} ({agent.name})")
    return HumanAgentRead.model_validate(agent)


@router.get(
    "",
    response_model=List[HumanAgentRead],
    summary="List Human Agents",
    description="List human agents ordered by name, optionally filtered by company and status.",
)
async def list_human_agents(
    session: SessionDep,
    company_id: Optional[int] = None,
    agent_status: Optional[HumanAgentStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[HumanAgentRead]:
    agents = await HumanAgentRepository(session).list(
        limit=limit,
        offset=offset,
        filters={"company_id": company_id, "status": agent_status.value if agent_status else None},
    )
    return [HumanAgentRead.model_validate(a) for a in agents]


@router.get(
    "/{agent_id}",
    response_model=HumanAgentRead,
    summary="Get Human Agent",
    responses={404: {"description": "Human agent not found"}},
)
async def get_human_agent(agent_id: int, session: SessionDep) -> HumanAgentRead:
    return HumanAgentRead.model_validate(await _get_agent(HumanAgentRepository(session), agent_id))


@router.patch(
    "/{agent_id}",
    response_model=HumanAgentRead,
    summary="Update Human Agent",
    description="Update profile fields. Presence is changed through the status endpoint.",
    responses={404: {"description": "Human agent not found"}},
)
async def update_human_agent(agent_id: int, data: HumanAgentUpdate, session: SessionDep) -> HumanAgentRead:
    repo = HumanAgentRepository(session)
    agent = await _get_agent(repo, agent_id)
    for key, value in encode_json_fields(data.model_dump(exclude_unset=True), HUMAN_AGENT_JSON_FIELDS).items():
        setattr(agent, key, value)
    return HumanAgentRead.model_validate(await repo.update(agent))


@router.patch(
    "/{agent_id}/status",
    response_model=HumanAgentRead,
    summary="Set Human Agent Status",
    description="Change an agent's presence. Only online agents receive transferred calls.",
    responses={404: {"description": "Human agent not found"}},
)
async def set_human_agent_status(agent_id: int, data: HumanAgentStatusUpdate, session: SessionDep) -> HumanAgentRead:
    """
    Set presence status.

    - **status**: online, offline, busy or away. The change time is recorded.
    """
    repo = HumanAgentRepository(session)
    agent = await _get_agent(repo, agent_id)
    agent = await repo.set_status(agent, HumanAgentStatus(data.status))
    logger.info(f"Human agent {agent_id} is now {agent.status}")
    return HumanAgentRead.model_validate(agent)


@router.delete(
    "/{agent_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Human Agent",
    responses={404: {"description": "Human agent not found"}},
)
async def delete_human_agent(agent_id: int, session: SessionDep) -> None:
    if not await HumanAgentRepository(session).delete(agent_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Human agent {agent_id} not found")


@router.get(
    "/{agent_id}/stats",
    response_model=HumanAgentStats,
    summary="Get Human Agent Stats",
    description="Calls routed to the agent in total and those still live.",
    responses={404: {"description": "Human agent not found"}},
)
async def get_human_agent_stats(agent_id: int, session: SessionDep) -> HumanAgentStats:
    return await DashboardService(session).human_agent_stats(agent_id)
