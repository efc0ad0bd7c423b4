"""Unit tests for ChatbotService."""

from __future__ import annotations

import pytest

from lyriq.core.database.entities import Call, CustomerProfile, HumanAgent, KnowledgeBaseEntry
from lyriq.llm import LLMNotConfiguredError
from lyriq.server.services.chatbot import (
    HUMAN_TAKEOVER_MESSAGE,
    ChatbotService,
    build_system_prompt,
    needs_escalation,
)
from lyriq.server.services.errors import InvalidRequestError, NotFoundError


@pytest.fixture
def service(session, llm):
    return ChatbotService(session, llm)


@pytest.fixture
async def chat(service, company):
    return await service.create_session({"company_id": company.id, "customer_name": "Sam"})


class TestEscalationKeywords:
    @pytest.mark.parametrize(
        "message",
        ["I want to make a complaint", "Let me speak to a MANAGER", "I will call my lawyer", "there is an issue"],
    )
    def test_detected(self, message):
        assert needs_escalation(message)

    def test_plain_question(self):
        assert not needs_escalation("What time do you open?")


class TestSystemPrompt:
    def test_without_company_or_context(self):
        prompt = build_system_prompt(None, [], [], "", is_handover=False, escalate=True)

        assert "assistant for our company" in prompt
        assert "Customer is not signed in" in prompt
        assert "suggest connecting them with a human agent" in prompt

    def test_handover_suppresses_escalation_note(self, company):
        prompt = build_system_prompt(company, [], [], "", is_handover=True, escalate=True)

        assert "handed the chat back" in prompt
        assert "Welcome the customer back warmly" in prompt
        assert "suggest connecting them" not in prompt
        assert "ABOUT ACME ENERGY:" in prompt
        assert "Industry: utilities" in prompt


class TestSessions:
    async def test_create_session_for_missing_company(self, service):
        with pytest.raises(NotFoundError):
            await service.create_session({"company_id": 404})

    async def test_escalate_assign_hand_back_close(self, session, service, chat, company):
        agent = HumanAgent(company_id=company.id, name="Mia", status="online")
        session.add(agent)
        await session.commit()

        escalated = await service.escalate(chat.id, "angry customer")
        assert escalated.status == "escalated"
        assert escalated.escalation_reason == "angry customer"
        assert escalated.escalated_at is not None

        assigned = await service.assign(chat.id, agent.id)
        assert assigned.agent_id == agent.id

        handed_back = await service.hand_back(chat.id)
        assert handed_back.agent_id is None
        assert handed_back.status == "active"

        closed = await service.close(chat.id)
        assert closed.status == "closed"
        assert closed.closed_at is not None

    async def test_assign_unknown_agent(self, service, chat):
        with pytest.raises(NotFoundError):
            await service.assign(chat.id, 999)

    async def test_agent_message(self, service, chat):
        message = await service.post_agent_message(chat.id, 7, "Hi Sam, Mia here.")

        assert message.sender_type == "agent"
        assert message.sender_id == "7"
        assert [m.content for m in await service.list_messages(chat.id)] == ["Hi Sam, Mia here."]

    async def test_list_messages_missing_session(self, service):
        with pytest.raises(NotFoundError):
            await service.list_messages(12345)


class TestRespond:
    async def test_answers_with_knowledge(self, session, service, llm, chat, company):
        session.add(
            KnowledgeBaseEntry(
                company_id=company.id,
                title="Paying your bill",
                content="Pay online.",
                category="payments",
                embedding="[1, 0, 0, 0]",
            )
        )
        await session.commit()

        response = await service.respond(chat.id, "How do I pay my bill?")

        assert response.message == llm.reply
        assert response.human_takeover is False
        assert response.needs_escalation is False
        assert response.context_used.knowledge_base == 1
        assert response.context_used.user_context == "no"
        system_prompt = llm.completions[0][0]["content"]
        assert "Paying your bill: Pay online. (Category: payments)" in system_prompt
        assert llm.completions[0][1] == {"role": "user", "content": "How do I pay my bill?"}

        messages = await service.list_messages(chat.id)
        assert [(m.sender_type, m.content) for m in messages] == [
            ("user", "How do I pay my bill?"),
            ("ai", llm.reply),
        ]
        assert messages[1].get_metadata()["knowledge_base_results"] == 1

    async def test_history_is_included(self, service, llm, chat):
        await service.respond(chat.id, "First question")
        await service.respond(chat.id, "Second question")

        second_prompt = llm.completions[1][0]["content"]
        assert "user: First question" in second_prompt
        assert f"ai: {llm.reply}" in second_prompt

    async def test_signed_in_customer_context(self, session, service, llm, chat, company):
        profile = CustomerProfile(
            company_id=company.id, phone_number="+61411111111", user_id="user-1", name="Sam Lee", call_history_count=1
        )
        session.add(profile)
        await session.commit()
        session.add(Call(company_id=company.id, customer_profile_id=profile.id, summary="Asked about tariffs"))
        await session.commit()

        response = await service.respond(chat.id, "What did we discuss last time?", user_id="user-1")

        assert response.context_used.user_context == "yes"
        prompt = llm.completions[0][0]["content"]
        assert "Name: Sam Lee" in prompt
        assert "Asked about tariffs" in prompt

    async def test_unknown_user_context(self, service, llm, chat):
        response = await service.respond(chat.id, "Hello", user_id="ghost")

        assert response.context_used.user_context == "yes"
        assert "No account records found." in llm.completions[0][0]["content"]

    async def test_escalation_suggested(self, service, chat):
        response = await service.respond(chat.id, "I want to speak to a manager")

        assert response.needs_escalation is True

    async def test_human_handled_session_blocks_ai(self, service, llm, chat):
        await service.escalate(chat.id, "needs a person")

        response = await service.respond(chat.id, "Hello?", user_id="user-1")

        assert response.human_takeover is True
        assert response.message == HUMAN_TAKEOVER_MESSAGE
        assert llm.completions == []
        messages = await service.list_messages(chat.id)
        assert len(messages) == 1
        assert messages[0].get_metadata() == {"user_id": "user-1", "blocked_ai_response": True}

    async def test_handover_prompt_is_not_stored(self, service, llm, chat):
        await service.escalate(chat.id)
        await service.hand_back(chat.id)

        await service.respond(chat.id, "Customer returned from agent", is_handover_response=True)

        messages = await service.list_messages(chat.id)
        assert [m.sender_type for m in messages] == ["ai"]
        assert "handed the chat back" in llm.completions[0][0]["content"]

    async def test_blank_message(self, service, chat):
        with pytest.raises(InvalidRequestError):
            await service.respond(chat.id, "   ")

    async def test_requires_llm(self, session, chat):
        with pytest.raises(LLMNotConfiguredError):
            await ChatbotService(session).respond(chat.id, "Hello")

    async def test_human_handled_without_llm(self, session, service, chat):
        await service.escalate(chat.id)

        response = await ChatbotService(session).respond(chat.id, "Hello")

        assert response.human_takeover is True
