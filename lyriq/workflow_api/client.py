from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import WorkflowApiError, WorkflowNotFoundError
from .models import (
    CallHandlingInput,
    CallState,
    CampaignState,
    HealthStatus,
    IntegrationSyncInput,
    IntegrationSyncState,
    LeadProcessingInput,
    VapiCallTriggerResult,
    WorkflowExecutionInfo,
    WorkflowStartResult,
)

_CALL = "/api/workflows/call-handling"
_LEAD = "/api/workflows/lead-processing"
_SYNC = "/api/workflows/integration-sync"


class WorkflowApiClient:
    """
    Thin async HTTP client for the Temporal workflow bridge.

    Responsibilities:
    - start call-handling, lead-processing and integration-sync workflows
    - send signals and run state queries against them
    - generic status, listing, history and termination
    - ask the bridge to place an outbound VAPI call for a campaign

    The client does not retry; every failure surfaces as ``WorkflowApiError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        self._logger.debug("WorkflowApiClient: %s %s params=%s", method, url, params)
        try:
            r = await self._client.request(method, url, headers=self._headers(), json=json, params=params)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response) from e
        except httpx.HTTPError as e:
            raise WorkflowApiError(f"Workflow API unreachable: {e}") from e
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise WorkflowApiError(
                "Unexpected non-JSON response from workflow API", status_code=r.status_code, details=r.text
            ) from e

    @staticmethod
    def _status_error(response: httpx.Response) -> WorkflowApiError:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
        message = message or f"HTTP {response.status_code}"
        error_cls = WorkflowNotFoundError if response.status_code == 404 else WorkflowApiError
        return error_cls(message, status_code=response.status_code, details=body)

    async def _signal(self, base: str, workflow_id: str, signal: str, body: Optional[dict] = None) -> None:
        await self._request("POST", f"{base}/{workflow_id}/signal/{signal}", json=body or {})
        self._logger.debug("WorkflowApiClient: signalled %s on %s", signal, workflow_id)

    # ============ Health Check ============

    async def health_check(self) -> HealthStatus:
        return HealthStatus.model_validate(await self._request("GET", "/health"))

    # ============ Call Handling Workflow ============

    async def start_call_handling(self, params: CallHandlingInput) -> WorkflowStartResult:
        data = await self._request(
            "POST", f"{_CALL}/start", json=params.model_dump(by_alias=True, exclude_none=True)
        )
        result = WorkflowStartResult.model_validate(data)
        self._logger.debug("WorkflowApiClient.start_call_handling: started %s", result.workflow_id)
        return result

    async def signal_human_handoff(self, workflow_id: str, reason: str) -> None:
        await self._signal(_CALL, workflow_id, "human-handoff", {"reason": reason})

    async def signal_human_accepted(self, workflow_id: str, agent_id: str) -> None:
        await self._signal(_CALL, workflow_id, "human-accepted", {"agentId": agent_id})

    async def signal_call_ended(self, workflow_id: str) -> None:
        await self._signal(_CALL, workflow_id, "call-ended")

    async def send_transcript(self, workflow_id: str, speaker: str, text: str) -> None:
        await self._signal(_CALL, workflow_id, "transcript", {"speaker": speaker, "text": text})

    async def get_call_state(self, workflow_id: str) -> CallState:
        return CallState.model_validate(await self._request("GET", f"{_CALL}/{workflow_id}/query/state"))

    # ============ Lead Processing Workflow ============

    async def start_lead_processing(self, params: LeadProcessingInput) -> WorkflowStartResult:
        data = await self._request(
            "POST", f"{_LEAD}/start", json=params.model_dump(by_alias=True, exclude_none=True)
        )
        return WorkflowStartResult.model_validate(data)

    async def pause_campaign(self, workflow_id: str) -> None:
        await self._signal(_LEAD, workflow_id, "pause")

    async def resume_campaign(self, workflow_id: str) -> None:
        await self._signal(_LEAD, workflow_id, "resume")

    async def cancel_campaign(self, workflow_id: str) -> None:
        await self._signal(_LEAD, workflow_id, "cancel")

    async def get_campaign_state(self, workflow_id: str) -> CampaignState:
        return CampaignState.model_validate(await self._request("GET", f"{_LEAD}/{workflow_id}/query/state"))

    # ============ Integration Sync Workflow ============

    async def start_integration_sync(self, params: IntegrationSyncInput) -> WorkflowStartResult:
        data = await self._request(
            "POST", f"{_SYNC}/start", json=params.model_dump(by_alias=True, exclude_none=True)
        )
        return WorkflowStartResult.model_validate(data)

    async def trigger_immediate_sync(self, workflow_id: str, integration_id: Optional[str] = None) -> None:
        body = {"integrationId": integration_id} if integration_id is not None else {}
        await self._signal(_SYNC, workflow_id, "sync-now", body)

    async def pause_sync(self, workflow_id: str) -> None:
        await self._signal(_SYNC, workflow_id, "pause")

    async def resume_sync(self, workflow_id: str) -> None:
        await self._signal(_SYNC, workflow_id, "resume")

    async def get_sync_state(self, workflow_id: str) -> IntegrationSyncState:
        return IntegrationSyncState.model_validate(
            await self._request("GET", f"{_SYNC}/{workflow_id}/query/state")
        )

    # ============ Generic Workflow Operations ============

    async def get_workflow_status(self, workflow_id: str) -> WorkflowExecutionInfo:
        return WorkflowExecutionInfo.model_validate(
            await self._request("GET", f"/api/workflows/{workflow_id}/status")
        )

    async def list_workflows(
        self,
        *,
        workflow_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        company_id: Optional[str] = None,
    ) -> List[WorkflowExecutionInfo]:
        params = {
            k: str(v)
            for k, v in {
                "workflowType": workflow_type,
                "status": status,
                "limit": limit,
                "companyId": company_id,
            }.items()
            if v is not None
        }
        data = await self._request("GET", "/api/workflows", params=params or None)
        if not isinstance(data, list):
            raise WorkflowApiError("Unexpected response shape from list_workflows", details=data)
        workflows = [WorkflowExecutionInfo.model_validate(item) for item in data]
        self._logger.debug("WorkflowApiClient.list_workflows: got %d workflows", len(workflows))
        return workflows

    async def terminate_workflow(self, workflow_id: str, reason: str) -> None:
        await self._request("POST", f"/api/workflows/{workflow_id}/terminate", json={"reason": reason})

    async def get_workflow_history(self, workflow_id: str) -> List[Any]:
        data = await self._request("GET", f"/api/workflows/{workflow_id}/history")
        return data if isinstance(data, list) else []

    # ============ Campaign Calls ============

    async def trigger_vapi_call(
        self,
        phone_number: str,
        *,
        customer_name: Optional[str] = None,
        workflow_id: Optional[str] = None,
        trigger_source: Optional[str] = None,
    ) -> VapiCallTriggerResult:
        payload: Dict[str, str] = {"phoneNumber": phone_number}
        if customer_name:
            payload["customerName"] = customer_name
        if workflow_id:
            payload["workflowId"] = workflow_id
        if trigger_source:
            payload["triggerSource"] = trigger_source
        data = await self._request("POST", "/api/campaigns/trigger-vapi-call", json=payload)
        raw = data if isinstance(data, dict) else {}
        vapi_call_id = raw.get("vapiCallId") or raw.get("callId") or raw.get("call_id")
        self._logger.debug("WorkflowApiClient.trigger_vapi_call: vapi_call_id=%s", vapi_call_id)
        return VapiCallTriggerResult(vapi_call_id=str(vapi_call_id) if vapi_call_id else None, raw=raw)
