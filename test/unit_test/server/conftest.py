"""
Fixtures for server tests.

External systems are replaced with in-process fakes: the workflow bridge and
VAPI are real clients over ``httpx.MockTransport``, Twilio and OpenAI are
scripted objects. The ``client`` fixture wires all of them into the FastAPI
app through ``dependency_overrides``.
"""

from __future__ import annotations

import json as _json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from lyriq.core.database import create_sessionmaker, get_session
from lyriq.llm import LLMError, LLMNotConfiguredError
from lyriq.server.main import app
from lyriq.server.services.deps import (
    get_llm_client,
    get_optional_llm_client,
    get_optional_telephony,
    get_telephony,
    get_vapi_client,
    get_workflow_client,
)
from lyriq.server.services.events import CallEventBroker, get_event_broker
from lyriq.voice import TelephonyNotConfiguredError, TwilioTelephony, VapiClient
from lyriq.voice.telephony import TranscriptionStreams, TwilioCallInfo
from lyriq.workflow_api import WorkflowApiClient

BRIDGE_URL = "http://mock-bridge"
VAPI_URL = "http://mock-vapi"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]

_DEFAULT_STATES = {
    "call-handling": {"status": "ai_handling", "currentHandler": "ai", "transcriptCount": 0},
    "lead-processing": {"status": "running", "totalLeads": 10, "processedLeads": 2},
    "integration-sync": {"status": "running", "syncCounts": {}},
}


class FakeBridge:
    """Scriptable stand-in for the workflow bridge HTTP API.

    Every request is recorded. ``routes`` keyed by ``(method, path)`` take
    precedence over the default answers.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.workflow_status = "RUNNING"
        self.vapi_call_id: Optional[str] = "vapi-call-1"
        self._started = 0

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return _json.loads(content.decode("utf-8")) if content else None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        route = self.routes.get((request.method, path))
        if route is not None:
            return route(request) if callable(route) else route
        if request.method == "POST" and path.endswith("/start"):
            self._started += 1
            workflow_type = path.split("/")[3]
            return httpx.Response(200, json={"workflowId": f"{workflow_type}-{self._started}", "runId": "run-1"})
        if "/signal/" in path or path.endswith("/terminate"):
            return httpx.Response(200, json={"success": True})
        if path.endswith("/query/state"):
            return httpx.Response(200, json=_DEFAULT_STATES[path.split("/")[3]])
        if path.endswith("/status"):
            workflow_id = path.split("/")[3]
            return httpx.Response(
                200,
                json={
                    "workflowId": workflow_id,
                    "status": self.workflow_status,
                    "workflowType": "workflow",
                    "completedAt": None if self.workflow_status == "RUNNING" else "2026-10-18T10:00:00Z",
                },
            )
        if path.endswith("/history"):
            return httpx.Response(200, json=[{"eventId": 1, "eventType": "WorkflowExecutionStarted"}])
        if path == "/api/workflows":
            return httpx.Response(200, json=[])
        if path == "/api/campaigns/trigger-vapi-call":
            return httpx.Response(200, json={"success": True, "vapiCallId": self.vapi_call_id})
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})
        return httpx.Response(404, json={"message": "Workflow not found"})


class FakeLLM:
    """Deterministic language model.

    Embeddings mark which topic words a text contains, so related texts score
    a cosine similarity of 1.0 and unrelated ones 0.0.
    """

    TOPICS = ("bill", "hours", "refund", "outage")

    def __init__(self, reply: str = "Happy to help with that.") -> None:
        self.reply = reply
        self.embedded: List[str] = []
        self.completions: List[List[Dict[str, str]]] = []
        self.fail = False

    async def embed(self, text: str) -> List[float]:
        if self.fail:
            raise LLMError("Embedding request failed: provider down")
        self.embedded.append(text)
        lowered = text.lower()
        return [1.0 if topic in lowered else 0.0 for topic in self.TOPICS]

    async def complete(self, messages, *, max_tokens: int = 600, temperature: float = 0.7) -> str:
        if self.fail:
            raise LLMError("Chat completion failed: provider down")
        self.completions.append(messages)
        return self.reply


def make_telephony(status: str = "in-progress") -> MagicMock:
    telephony = MagicMock(spec=TwilioTelephony)
    telephony.fetch_call_status = AsyncMock(return_value=TwilioCallInfo(sid="CA1", status=status))
    telephony.hang_up = AsyncMock(return_value=None)
    telephony.start_dual_streams = AsyncMock(
        return_value=TranscriptionStreams(inbound_stream_sid="MZ-in", outbound_stream_sid="MZ-out")
    )
    return telephony


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def workflow_client(bridge: FakeBridge) -> WorkflowApiClient:
    return WorkflowApiClient(BRIDGE_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(bridge.handler)))


@pytest.fixture
def vapi_calls() -> Dict[str, Dict[str, Any]]:
    """VAPI call payloads by id; unknown ids answer 404."""
    return {}


@pytest.fixture
def vapi_client(vapi_calls) -> VapiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        call_id = request.url.path.rsplit("/", 1)[-1]
        if call_id in vapi_calls:
            return httpx.Response(200, json=vapi_calls[call_id])
        return httpx.Response(404, text="Not Found")

    return VapiClient("vapi-key", base_url=VAPI_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def telephony() -> MagicMock:
    return make_telephony()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def broker() -> CallEventBroker:
    return CallEventBroker()


@pytest.fixture
async def client(test_engine, workflow_client, vapi_client, telephony, llm, broker):
    """HTTP client for the app with every external dependency faked."""
    session_maker = create_sessionmaker(test_engine)

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_workflow_client] = lambda: workflow_client
    app.dependency_overrides[get_vapi_client] = lambda: vapi_client
    app.dependency_overrides[get_telephony] = lambda: telephony
    app.dependency_overrides[get_optional_telephony] = lambda: telephony
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_optional_llm_client] = lambda: llm
    app.dependency_overrides[get_event_broker] = lambda: broker

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as http_client:
            yield http_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def telephony_factory() -> Callable[..., MagicMock]:
    return make_telephony


def _not_configured(error_cls):
    def provider():
        raise error_cls()

    return provider


@pytest.fixture
def without_llm(client):
    """Serve requests as if no OpenAI key were configured."""
    app.dependency_overrides[get_llm_client] = _not_configured(LLMNotConfiguredError)
    app.dependency_overrides[get_optional_llm_client] = lambda: None


@pytest.fixture
def without_telephony(client):
    """Serve requests as if no Twilio credentials were configured."""
    app.dependency_overrides[get_telephony] = _not_configured(TelephonyNotConfiguredError)
    app.dependency_overrides[get_optional_telephony] = lambda: None
