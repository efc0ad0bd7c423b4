"""
API endpoints for the website chat.

Customers chat with a retrieval-augmented assistant grounded in the
company's knowledge base. Sessions can be escalated, assigned to a human
agent, handed back to the assistant and closed.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from lyriq.core.database.repositories import ChatSessionRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import ChatSessionStatus
from lyriq.core.models.io.chat import (
    AgentMessageCreate,
    AssignRequest,
    ChatMessageRead,
    ChatRequest,
    ChatResponse,
    ChatSessionCreate,
    ChatSessionRead,
    EscalateRequest,
)
from lyriq.server.services.chatbot import ChatbotService
from lyriq.server.services.deps import OptionalLLMDep, SessionDep

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/sessions",
    response_model=ChatSessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Start Chat Session",
    responses={404: {"description": "Company not found"}},
)
async def create_chat_session(data: ChatSessionCreate, session: SessionDep) -> ChatSessionRead:
    """
    Start a chat session.

    - **company_id**: Company whose assistant answers.
    - **user_id**: Signed-in customer, when known.
    """
    chat_session = await ChatbotService(session).create_session(data.model_dump())
    return ChatSessionRead.model_validate(chat_session)


@router.get(
    "/sessions",
    response_model=List[ChatSessionRead],
    summary="List Chat Sessions",
    description="List chat sessions, optionally filtered by company and status.",
)
async def list_chat_sessions(
    session: SessionDep,
    company_id: Optional[int] = None,
    session_status: Optional[ChatSessionStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[ChatSessionRead]:
    sessions = await ChatSessionRepository(session).list(
        limit=limit,
        offset=offset,
        filters={"company_id": company_id, "status": session_status.value if session_status else None},
    )
    return [ChatSessionRead.model_validate(s) for s in sessions]


@router.get(
    "/sessions/{session_id}",
    response_model=ChatSessionRead,
    summary="Get Chat Session",
    responses={404: {"description": "Chat session not found"}},
)
async def get_chat_session(session_id: int, session: SessionDep) -> ChatSessionRead:
    return ChatSessionRead.model_validate(await ChatbotService(session).get_session(session_id))


@router.post(
    "/sessions/{session_id}/messages",
    response_model=ChatResponse,
    summary="Send Chat Message",
    description="Answer a customer message with the company's knowledge base and the conversation so far.",
    responses={
        400: {"description": "Empty message"},
        404: {"description": "Chat session not found"},
        502: {"description": "Language model request failed"},
        503: {"description": "OpenAI is not configured"},
    },
)
async def send_chat_message(
    session_id: int, data: ChatRequest, session: SessionDep, llm: OptionalLLMDep
) -> ChatResponse:
    """
    Send a message to the assistant.

    - **message**: The customer's text.
    - **user_id**: Signed-in customer; their profile and recent calls become context.
    - **is_handover_response**: The chat was just handed back from a human agent.

    Sessions that are escalated, closed or handled by a human agent store the
    message and return a takeover notice instead of an AI answer.
    """
    return await ChatbotService(session, llm).respond(
        session_id,
        data.message,
        user_id=data.user_id,
        is_handover_response=data.is_handover_response,
    )


@router.get(
    "/sessions/{session_id}/messages",
    response_model=List[ChatMessageRead],
    summary="List Chat Messages",
    responses={404: {"description": "Chat session not found"}},
)
async def list_chat_messages(session_id: int, session: SessionDep) -> List[ChatMessageRead]:
    messages = await ChatbotService(session).list_messages(session_id)
    return [ChatMessageRead.model_validate(m) for m in messages]


@router.post(
    "/sessions/{session_id}/agent-messages",
    response_model=ChatMessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post Agent Message",
    description="Store a message written by the human agent handling the session.",
    responses={404: {"description": "Chat session not found"}},
)
async def post_agent_message(session_id: int, data: AgentMessageCreate, session: SessionDep) -> ChatMessageRead:
    message = await ChatbotService(session).post_agent_message(session_id, data.agent_id, data.content)
    return ChatMessageRead.model_validate(message)


@router.post(
    "/sessions/{session_id}/escalate",
    response_model=ChatSessionRead,
    summary="Escalate Chat Session",
    description="Stop AI answers and wait for a human agent.",
    responses={404: {"description": "Chat session not found"}},
)
async def escalate_chat_session(
    session_id: int, session: SessionDep, data: Optional[EscalateRequest] = None
) -> ChatSessionRead:
    chat_session = await ChatbotService(session).escalate(session_id, data.reason if data else None)
    return ChatSessionRead.model_validate(chat_session)


@router.post(
    "/sessions/{session_id}/assign",
    response_model=ChatSessionRead,
    summary="Assign Human Agent",
    responses={404: {"description": "Chat session or human agent not found"}},
)
async def assign_chat_session(session_id: int, data: AssignRequest, session: SessionDep) -> ChatSessionRead:
    chat_session = await ChatbotService(session).assign(session_id, data.agent_id)
    return ChatSessionRead.model_validate(chat_session)


@router.post(
    "/sessions/{session_id}/hand-back",
    response_model=ChatSessionRead,
    summary="Hand Back to AI",
    description="Release the human agent and let the assistant answer again.",
    responses={404: {"description": "Chat session not found"}},
)
async def hand_back_chat_session(session_id: int, session: SessionDep) -> ChatSessionRead:
    return ChatSessionRead.model_validate(await ChatbotService(session).hand_back(session_id))


@router.post(
    "/sessions/{session_id}/close",
    response_model=ChatSessionRead,
    summary="Close Chat Session",
    responses={404: {"description": "Chat session not found"}},
)
async def close_chat_session(session_id: int, session: SessionDep) -> ChatSessionRead:
    return ChatSessionRead.model_validate(await ChatbotService(session).close(session_id))
