import pytest
from httpx import AsyncClient

from lyriq.core.database.entities import Call

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/human-agents"


async def _create(client: AsyncClient, company_id: int, **fields) -> dict:
    response = await client.post(BASE, json={"company_id": company_id, "name": "Mia", **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_and_get(client: AsyncClient, company):
    agent = await _create(client, company.id, skills=["billing", "hardship"])

    assert agent["status"] == "offline"
    assert agent["skills"] == ["billing", "hardship"]

    response = await client.get(f"{BASE}/{agent['id']}")
    assert response.json()["name"] == "Mia"


async def test_create_for_missing_company(client: AsyncClient):
    response = await client.post(BASE, json={"company_id": 999, "name": "Mia"})
    assert response.status_code == 404


async def test_list_ordered_by_name_and_filtered(client: AsyncClient, company):
    await _create(client, company.id, name="Zoe", status="online")
    await _create(client, company.id, name="Adam")

    response = await client.get(BASE, params={"company_id": company.id})
    assert [a["name"] for a in response.json()] == ["Adam", "Zoe"]

    response = await client.get(BASE, params={"agent_status": "online"})
    assert [a["name"] for a in response.json()] == ["Zoe"]


async def test_update_profile(client: AsyncClient, company):
    agent = await _create(client, company.id)

    response = await client.patch(f"{BASE}/{agent['id']}", json={"skills": ["outages"], "max_concurrent_calls": 2})

    assert response.status_code == 200
    assert response.json()["skills"] == ["outages"]
    assert response.json()["max_concurrent_calls"] == 2


async def test_set_status_records_change_time(client: AsyncClient, company):
    agent = await _create(client, company.id)
    assert agent["last_status_change_at"] is None

    response = await client.patch(f"{BASE}/{agent['id']}/status", json={"status": "online"})

    assert response.status_code == 200
    assert response.json()["status"] == "online"
    assert response.json()["last_status_change_at"] is not None


async def test_set_invalid_status(client: AsyncClient, company):
    agent = await _create(client, company.id)

    response = await client.patch(f"{BASE}/{agent['id']}/status", json={"status": "sleeping"})

    assert response.status_code == 422


async def test_stats(client: AsyncClient, session, company):
    agent = await _create(client, company.id)
    session.add_all(
        [
            Call(company_id=company.id, agent_id=agent["id"], status="ringing"),
            Call(company_id=company.id, agent_id=agent["id"], status="completed"),
        ]
    )
    await session.commit()

    response = await client.get(f"{BASE}/{agent['id']}/stats")

    assert response.json() == {"agent_id": agent["id"], "calls_handled": 2, "calls_active": 1}


async def test_missing_agent(client: AsyncClient):
    assert (await client.get(f"{BASE}/404")).status_code == 404
    assert (await client.patch(f"{BASE}/404/status", json={"status": "online"})).status_code == 404
    assert (await client.get(f"{BASE}/404/stats")).status_code == 404
    assert (await client.delete(f"{BASE}/404")).status_code == 404
