"""
Chatbot service with retrieval-augmented answers.

Answers website chat messages with the company's knowledge base, the
conversation so far and, for signed-in customers, their profile and recent
calls. Sessions that are escalated, closed or taken over by a human agent
are not answered by the model; the customer's message is stored and a
takeover notice is returned instead.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database.base import utc_now
from lyriq.core.database.entities.chat_sessions import ChatMessage, ChatSession
from lyriq.core.database.entities.companies import Company
from lyriq.core.database.repositories import (
    CallRepository,
    ChatMessageRepository,
    ChatSessionRepository,
    CompanyRepository,
    CustomerProfileRepository,
    HumanAgentRepository,
)
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import ChatSessionStatus, MessageSender
from lyriq.core.models.io.chat import ChatResponse, ContextUsage
from lyriq.llm import LLMClient, LLMNotConfiguredError

from .errors import InvalidRequestError, NotFoundError
from .knowledge import KnowledgeMatch, KnowledgeService

logger = get_logger(__name__)

HUMAN_TAKEOVER_MESSAGE = "A human agent is now handling your chat. They will respond to you shortly."

ESCALATION_KEYWORDS = (
    "complaint",
    "problem",
    "issue",
    "manager",
    "speak to human",
    "human agent",
    "dissatisfied",
    "angry",
    "legal",
    "lawyer",
    "solicitor",
    "ombudsman",
)

HISTORY_LIMIT = 10

GUIDELINES = """GUIDELINES:
- Be friendly, professional, and empathetic
- Use specific information from the knowledge base when relevant
- Reference the customer's account information when answering questions about it
- If the customer asks about their account but is not signed in, suggest they sign in
- Keep responses concise but helpful
- If you don't have specific information, be honest and offer alternatives"""

HANDOVER_INSTRUCTION = (
    "IMPORTANT: You are resuming this conversation after a human agent has handed the chat back to you. "
    "Welcome the customer back naturally and ask how you can continue to help them."
)

ESCALATION_INSTRUCTION = (
    "IMPORTANT: The customer seems to need human assistance. Acknowledge their concern and suggest "
    "connecting them with a human agent."
)


def needs_escalation(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in ESCALATION_KEYWORDS)


def build_system_prompt(
    company: Optional[Company],
    knowledge: List[KnowledgeMatch],
    history: List[ChatMessage],
    user_context: str,
    *,
    is_handover: bool,
    escalate: bool,
) -> str:
    """Assemble the system prompt sent ahead of the customer's message."""
    name = company.name if company else "our company"
    parts = [f"You are a helpful customer service assistant for {name}."]
    if is_handover:
        parts.append(HANDOVER_INSTRUCTION)

    if company is not None:
        about = [f"ABOUT {company.name.upper()}:"]
        if company.description:
            about.append(company.description)
        if company.industry:
            about.append(f"Industry: {company.industry}")
        if company.phone:
            about.append(f"Phone: {company.phone}")
        if company.email:
            about.append(f"Email: {company.email}")
        parts.append("\n".join(about))

    if knowledge:
        articles = "\n\n".join(
            f"{m.entry.title}: {m.entry.content} (Category: {m.entry.category or 'general'})" for m in knowledge
        )
        parts.append(f"KNOWLEDGE BASE:\n{articles}")

    parts.append(user_context or "Customer is not signed in - cannot access account information.")

    conversation = "\n".join(f"{m.sender_type}: {m.content}" for m in history)
    parts.append(f"CONVERSATION HISTORY:\n{conversation}")

    guidelines = GUIDELINES
    if is_handover:
        guidelines += "\n- Welcome the customer back warmly and seamlessly continue the conversation"
    parts.append(guidelines)

    if escalate and not is_handover:
        parts.append(ESCALATION_INSTRUCTION)
    return "\n\n".join(parts)


class ChatbotService:
    """Chat session management and RAG answering."""

    def __init__(self, session: AsyncSession, llm: Optional[LLMClient] = None) -> None:
        self.session = session
        self.llm = llm
        self.sessions = ChatSessionRepository(session)
        self.messages = ChatMessageRepository(session)
        self.companies = CompanyRepository(session)
        self.profiles = CustomerProfileRepository(session)
        self.calls = CallRepository(session)
        self.human_agents = HumanAgentRepository(session)
        self.knowledge = KnowledgeService(session, llm)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_session(self, session_id: int) -> ChatSession:
        chat_session = await self.sessions.get_by_id(session_id)
        if chat_session is None:
            raise NotFoundError("Chat session", session_id)
        return chat_session

    async def create_session(self, data: dict) -> ChatSession:
        if await self.companies.get_by_id(data["company_id"]) is None:
            raise NotFoundError("Company", data["company_id"])
        chat_session = ChatSession(**data, status=ChatSessionStatus.active.value)
        return await self.sessions.create(chat_session)

    async def escalate(self, session_id: int, reason: Optional[str] = None) -> ChatSession:
        chat_session = await self.get_session(session_id)
        chat_session.status = ChatSessionStatus.escalated.value
        chat_session.escalation_reason = reason
        chat_session.escalated_at = utc_now()
        logger.info(f"Chat session {session_id} escalated: {reason or 'no reason given'}")
        return await self.sessions.update(chat_session)

    async def assign(self, session_id: int, agent_id: int) -> ChatSession:
        chat_session = await self.get_session(session_id)
        if await self.human_agents.get_by_id(agent_id) is None:
            raise NotFoundError("Human agent", agent_id)
        chat_session.agent_id = agent_id
        logger.info(f"Chat session {session_id} assigned to agent {agent_id}")
        return await self.sessions.update(chat_session)

    async def hand_back(self, session_id: int) -> ChatSession:
        chat_session = await self.get_session(session_id)
        chat_session.agent_id = None
        chat_session.status = ChatSessionStatus.active.value
        logger.info(f"Chat session {session_id} handed back to the AI")
        return await self.sessions.update(chat_session)

    async def close(self, session_id: int) -> ChatSession:
        chat_session = await self.get_session(session_id)
        chat_session.status = ChatSessionStatus.closed.value
        chat_session.closed_at = utc_now()
        return await self.sessions.update(chat_session)

    async def list_messages(self, session_id: int) -> List[ChatMessage]:
        await self.get_session(session_id)
        return await self.messages.list_for_session(session_id)

    async def post_agent_message(self, session_id: int, agent_id: int, content: str) -> ChatMessage:
        await self.get_session(session_id)
        return await self.messages.add_message(
            session_id, MessageSender.agent.value, content, sender_id=str(agent_id)
        )

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    async def _user_context(self, user_id: Optional[str]) -> str:
        if not user_id:
            return ""
        profile = await self.profiles.get_by_user_id(user_id)
        if profile is None:
            return "Customer Account Information:\nNo account records found."
        lines = ["Customer Account Information:"]
        if profile.name:
            lines.append(f"Name: {profile.name}")
        lines.append(f"Phone: {profile.phone_number}")
        if profile.email:
            lines.append(f"Email: {profile.email}")
        if profile.notes:
            lines.append(f"Notes: {profile.notes}")
        lines.append(f"Previous calls: {profile.call_history_count}")
        recent = await self.calls.recent_for_customer(profile.id)
        if recent:
            lines.append("Recent Calls:")
            for call in recent:
                when = call.created_at.strftime("%Y-%m-%d")
                summary = f" - {call.summary}" if call.summary else ""
                lines.append(f"{when}: {call.direction} call, {call.status}{summary}")
        return "\n".join(lines)

    async def respond(
        self,
        session_id: int,
        message: str,
        *,
        user_id: Optional[str] = None,
        is_handover_response: bool = False,
    ) -> ChatResponse:
        """Answer one customer message.

        Args:
            session_id: Chat session ID
            message: Customer message text
            user_id: Signed-in customer, used for personal context
            is_handover_response: The session was just handed back to the AI; the
                message is an agent-side prompt and is not stored as a user message

        Returns:
            ChatResponse with the reply and whether escalation is suggested
        """
        if not message or not message.strip():
            raise InvalidRequestError("Message is required")
        chat_session = await self.get_session(session_id)

        if not is_handover_response and chat_session.is_human_handled:
            logger.info(f"Chat session {session_id} is handled by a human; AI reply skipped")
            await self.messages.add_message(
                session_id,
                MessageSender.user.value,
                message,
                metadata={"user_id": user_id, "blocked_ai_response": True},
            )
            return ChatResponse(message=HUMAN_TAKEOVER_MESSAGE, needs_escalation=False, human_takeover=True)

        if self.llm is None:
            raise LLMNotConfiguredError()

        query_embedding = await self.llm.embed(message)
        knowledge = await self.knowledge.search_by_vector(chat_session.company_id, query_embedding)
        history = await self.messages.recent_for_session(session_id, HISTORY_LIMIT)
        user_context = await self._user_context(user_id)
        company = await self.companies.get_by_id(chat_session.company_id)
        escalate = needs_escalation(message)

        system_prompt = build_system_prompt(
            company, knowledge, history, user_context, is_handover=is_handover_response, escalate=escalate
        )
        reply = await self.llm.complete(
            [{"role": "system", "content": system_prompt}, {"role": "user", "content": message}],
            max_tokens=600,
            temperature=0.7,
        )

        if not is_handover_response:
            await self.messages.add_message(
                session_id, MessageSender.user.value, message, metadata={"user_id": user_id}
            )
        await self.messages.add_message(
            session_id,
            MessageSender.ai.value,
            reply,
            metadata={
                "escalation_suggested": escalate,
                "knowledge_base_results": len(knowledge),
                "user_context_used": bool(user_id),
                "has_user_context": bool(user_context),
            },
        )
        logger.debug(
            f"Chat session {session_id}: answered with {len(knowledge)} knowledge matches, escalation={escalate}"
        )
        return ChatResponse(
            message=reply,
            needs_escalation=escalate,
            human_takeover=False,
            context_used=ContextUsage(
                knowledge_base=len(knowledge),
                user_context="yes" if user_context else "no",
            ),
        )
