"""
Workflow status monitors.

Each monitor follows one workflow on the bridge by polling its status or
state query at a fixed interval while the workflow is live. A monitor keeps
the latest snapshot, a loading flag and the last error, so callers (the SSE
endpoint, the dashboard services) can read them at any time.

Polling intervals and stop conditions:

================================  ========  =================================
Monitor                           Interval  Keeps polling while
================================  ========  =================================
WorkflowStatusMonitor             2s        status == RUNNING
CallWorkflowMonitor               1s        status not completed / failed
CampaignWorkflowMonitor           3s        status == running
IntegrationSyncMonitor            5s        status == running
================================  ========  =================================

``refresh`` never raises: failures are stored on ``error`` and the previous
snapshot is kept. Signal actions do raise, then refresh on success.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Awaitable, Callable, Generic, List, Optional, TypeVar

from pydantic import ValidationError

from .client import WorkflowApiClient
from .errors import WorkflowApiError
from .models import CallState, CampaignState, IntegrationSyncState, WorkflowExecutionInfo

SnapshotT = TypeVar("SnapshotT")

Sleep = Callable[[float], Awaitable[None]]

WORKFLOW_LIST_LIMIT = 50


class PollingMonitor(ABC, Generic[SnapshotT]):
    """Base class holding the snapshot/loading/error triple and the poll loop."""

    default_poll_interval: float = 2.0

    def __init__(
        self,
        client: WorkflowApiClient,
        workflow_id: Optional[str],
        *,
        poll_interval: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.workflow_id = workflow_id
        self.poll_interval = poll_interval if poll_interval is not None else self.default_poll_interval
        self.state: Optional[SnapshotT] = None
        self.is_loading = False
        self.error: Optional[Exception] = None
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    @abstractmethod
    async def _fetch(self, workflow_id: str) -> SnapshotT:
        """Query the bridge for the current snapshot."""

    @abstractmethod
    def should_poll(self, snapshot: SnapshotT) -> bool:
        """Whether the workflow is still live and worth polling again."""

    async def refresh(self) -> Optional[SnapshotT]:
        if self.workflow_id is None:
            self.state = None
            return None

        self.is_loading = True
        self.error = None
        try:
            self.state = await self._fetch(self.workflow_id)
        except (WorkflowApiError, ValidationError) as e:
            self._logger.warning("%s.refresh: %s failed: %s", type(self).__name__, self.workflow_id, e)
            self.error = e
        finally:
            self.is_loading = False
        return self.state

    async def watch(self) -> AsyncIterator[SnapshotT]:
        """Yield a snapshot per poll until the workflow stops being live.

        The first terminal snapshot is yielded before stopping. The loop also
        ends when there is nothing to report: no workflow id, or an error
        before any snapshot was obtained.
        """
        while True:
            snapshot = await self.refresh()
            if snapshot is None:
                return
            yield snapshot
            if not self.should_poll(snapshot):
                return
            await self._sleep(self.poll_interval)

    async def _signal_then_refresh(self, send: Callable[[str], Awaitable[None]], *, refresh: bool = True) -> None:
        if self.workflow_id is None:
            return
        await send(self.workflow_id)
        if refresh:
            await self.refresh()


class WorkflowStatusMonitor(PollingMonitor[WorkflowExecutionInfo]):
    """Generic execution status of any workflow."""

    default_poll_interval = 2.0

    async def _fetch(self, workflow_id: str) -> WorkflowExecutionInfo:
        return await self.client.get_workflow_status(workflow_id)

    def should_poll(self, snapshot: WorkflowExecutionInfo) -> bool:
        return snapshot.status == "RUNNING"


class CallWorkflowMonitor(PollingMonitor[CallState]):
    """Live state of a call-handling workflow, with handoff actions."""

    default_poll_interval = 1.0

    async def _fetch(self, workflow_id: str) -> CallState:
        return await self.client.get_call_state(workflow_id)

    def should_poll(self, snapshot: CallState) -> bool:
        return snapshot.status not in ("completed", "failed")

    async def request_handoff(self, reason: str) -> None:
        await self._signal_then_refresh(lambda wid: self.client.signal_human_handoff(wid, reason))

    async def accept_handoff(self, agent_id: str) -> None:
        await self._signal_then_refresh(lambda wid: self.client.signal_human_accepted(wid, agent_id))

    async def end_call(self) -> None:
        await self._signal_then_refresh(self.client.signal_call_ended)

    async def send_transcript(self, speaker: str, text: str) -> None:
        # Transcript lines arrive too often to refresh after each one
        await self._signal_then_refresh(lambda wid: self.client.send_transcript(wid, speaker, text), refresh=False)


class CampaignWorkflowMonitor(PollingMonitor[CampaignState]):
    """Progress of a lead-processing campaign, with pause/resume/cancel."""

    default_poll_interval = 3.0

    async def _fetch(self, workflow_id: str) -> CampaignState:
        return await self.client.get_campaign_state(workflow_id)

    def should_poll(self, snapshot: CampaignState) -> bool:
        return snapshot.status == "running"

    async def pause(self) -> None:
        await self._signal_then_refresh(self.client.pause_campaign)

    async def resume(self) -> None:
        await self._signal_then_refresh(self.client.resume_campaign)

    async def cancel(self) -> None:
        await self._signal_then_refresh(self.client.cancel_campaign)


class IntegrationSyncMonitor(PollingMonitor[IntegrationSyncState]):
    """Progress of an integration-sync workflow."""

    default_poll_interval = 5.0

    async def _fetch(self, workflow_id: str) -> IntegrationSyncState:
        return await self.client.get_sync_state(workflow_id)

    def should_poll(self, snapshot: IntegrationSyncState) -> bool:
        return snapshot.status == "running"

    async def trigger_sync(self, integration_id: Optional[str] = None) -> None:
        await self._signal_then_refresh(lambda wid: self.client.trigger_immediate_sync(wid, integration_id))

    async def pause(self) -> None:
        await self._signal_then_refresh(self.client.pause_sync)

    async def resume(self) -> None:
        await self._signal_then_refresh(self.client.resume_sync)


class WorkflowListMonitor:
    """Most recent workflows of one company, optionally of one type."""

    def __init__(self, client: WorkflowApiClient, company_id: Optional[str], workflow_type: Optional[str] = None):
        self.client = client
        self.company_id = company_id
        self.workflow_type = workflow_type
        self.workflows: List[WorkflowExecutionInfo] = []
        self.is_loading = False
        self.error: Optional[Exception] = None
        self._logger = logging.getLogger(__name__)

    async def refresh(self) -> List[WorkflowExecutionInfo]:
        if self.company_id is None:
            self.workflows = []
            return self.workflows

        self.is_loading = True
        self.error = None
        try:
            self.workflows = await self.client.list_workflows(
                company_id=self.company_id,
                workflow_type=self.workflow_type,
                limit=WORKFLOW_LIST_LIMIT,
            )
        except (WorkflowApiError, ValidationError) as e:
            self._logger.warning("WorkflowListMonitor.refresh: company %s failed: %s", self.company_id, e)
            self.error = e
        finally:
            self.is_loading = False
        return self.workflows
