import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/chat/sessions"


async def _session(client: AsyncClient, company_id: int, **fields) -> dict:
    response = await client.post(BASE, json={"company_id": company_id, **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def _human_agent(client: AsyncClient, company_id: int) -> dict:
    response = await client.post("/api/v1/human-agents", json={"company_id": company_id, "name": "Mia"})
    return response.json()


async def test_start_session(client: AsyncClient, company):
    chat = await _session(client, company.id, customer_name="Sam")

    assert chat["status"] == "active"
    assert chat["agent_id"] is None
    assert (await client.get(f"{BASE}/{chat['id']}")).json()["customer_name"] == "Sam"


async def test_start_session_for_missing_company(client: AsyncClient):
    assert (await client.post(BASE, json={"company_id": 8})).status_code == 404


async def test_list_sessions_by_status(client: AsyncClient, company):
    open_chat = await _session(client, company.id)
    closed_chat = await _session(client, company.id)
    await client.post(f"{BASE}/{closed_chat['id']}/close")

    response = await client.get(BASE, params={"company_id": company.id, "session_status": "active"})

    assert [s["id"] for s in response.json()] == [open_chat["id"]]


async def test_answer_with_knowledge(client: AsyncClient, company, llm):
    await client.post(
        "/api/v1/knowledge-base",
        json={"company_id": company.id, "title": "Office hours", "content": "Open 8:30 to 5 on weekdays."},
    )
    chat = await _session(client, company.id)

    response = await client.post(f"{BASE}/{chat['id']}/messages", json={"message": "What are your hours?"})

    assert response.status_code == 200
    assert response.json() == {
        "message": "Happy to help with that.",
        "needs_escalation": False,
        "human_takeover": False,
        "context_used": {"knowledge_base": 1, "user_context": "no"},
    }
    system_prompt = llm.completions[0][0]["content"]
    assert "Office hours: Open 8:30 to 5 on weekdays." in system_prompt

    messages = (await client.get(f"{BASE}/{chat['id']}/messages")).json()
    assert [(m["sender_type"], m["content"]) for m in messages] == [
        ("user", "What are your hours?"),
        ("ai", "Happy to help with that."),
    ]
    assert messages[1]["metadata"]["knowledge_base_results"] == 1


async def test_escalation_keyword(client: AsyncClient, company):
    chat = await _session(client, company.id)

    response = await client.post(f"{BASE}/{chat['id']}/messages", json={"message": "I want to speak to a manager"})

    assert response.json()["needs_escalation"] is True


async def test_empty_message(client: AsyncClient, company):
    chat = await _session(client, company.id)

    response = await client.post(f"{BASE}/{chat['id']}/messages", json={"message": "   "})

    assert response.status_code == 400


async def test_answer_requires_openai(client: AsyncClient, without_llm, company):
    chat = await _session(client, company.id)

    response = await client.post(f"{BASE}/{chat['id']}/messages", json={"message": "Hello"})

    assert response.status_code == 503


async def test_llm_failure(client: AsyncClient, company, llm):
    chat = await _session(client, company.id)
    llm.fail = True

    response = await client.post(f"{BASE}/{chat['id']}/messages", json={"message": "Hello"})

    assert response.status_code == 502
    assert response.json()["error_type"] == "LLMError"


async def test_human_takeover(client: AsyncClient, company, llm):
    chat = await _session(client, company.id)
    agent = await _human_agent(client, company.id)

    assigned = (await client.post(f"{BASE}/{chat['id']}/assign", json={"agent_id": agent["id"]})).json()
    assert assigned["agent_id"] == agent["id"]

    response = await client.post(f"{BASE}/{chat['id']}/messages", json={"message": "Still there?"})
    assert response.json()["human_takeover"] is True
    assert llm.completions == []

    reply = await client.post(f"{BASE}/{chat['id']}/agent-messages", json={"agent_id": agent["id"], "content": "Yes!"})
    assert reply.status_code == 201
    assert reply.json()["sender_type"] == "agent"
    assert reply.json()["sender_id"] == str(agent["id"])

    handed_back = (await client.post(f"{BASE}/{chat['id']}/hand-back")).json()
    assert handed_back["agent_id"] is None
    assert handed_back["status"] == "active"

    response = await client.post(
        f"{BASE}/{chat['id']}/messages", json={"message": "Agent handed back", "is_handover_response": True}
    )
    assert response.json()["human_takeover"] is False
    senders = [m["sender_type"] for m in (await client.get(f"{BASE}/{chat['id']}/messages")).json()]
    assert senders == ["user", "agent", "ai"]


async def test_assign_unknown_agent(client: AsyncClient, company):
    chat = await _session(client, company.id)

    assert (await client.post(f"{BASE}/{chat['id']}/assign", json={"agent_id": 77})).status_code == 404


async def test_escalate_and_close(client: AsyncClient, company):
    chat = await _session(client, company.id)

    escalated = (await client.post(f"{BASE}/{chat['id']}/escalate", json={"reason": "Billing dispute"})).json()
    assert escalated["status"] == "escalated"
    assert escalated["escalation_reason"] == "Billing dispute"
    assert escalated["escalated_at"] is not None

    closed = (await client.post(f"{BASE}/{chat['id']}/close")).json()
    assert closed["status"] == "closed"
    assert closed["closed_at"] is not None


async def test_escalate_without_body(client: AsyncClient, company):
    chat = await _session(client, company.id)

    response = await client.post(f"{BASE}/{chat['id']}/escalate")

    assert response.status_code == 200
    assert response.json()["escalation_reason"] is None


async def test_missing_session(client: AsyncClient):
    assert (await client.get(f"{BASE}/41")).status_code == 404
    assert (await client.get(f"{BASE}/41/messages")).status_code == 404
