"""
Realtime call event feed.

An in-process publish/subscribe broker. The calls service publishes an event
whenever a call record changes or a transcript line is added, and every
subscriber of that company (or of all companies) receives it on its own
queue. The SSE endpoint ``GET /api/v1/calls/stream`` drains one queue per
connected dashboard.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from lyriq.core.logging_config import get_logger

logger = get_logger(__name__)

CallEventType = Literal["call_updated", "transcript_added"]


class CallEvent(BaseModel):
    """A change to a call, as pushed to dashboard subscribers."""

    event: CallEventType
    company_id: Optional[int] = None
    call_id: int
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CallEventBroker:
    """Fan out call events to per-subscriber queues.

    A subscriber registered with ``company_id=None`` receives the events of
    every company. A full queue drops the event for that subscriber only.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self.max_queue_size = max_queue_size
        self._subscribers: List[Tuple[Optional[int], asyncio.Queue]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, company_id: Optional[int] = None) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.append((company_id, queue))
        logger.debug(f"Subscriber added for company {company_id}; {self.subscriber_count} connected")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers = [(cid, q) for cid, q in self._subscribers if q is not queue]
        logger.debug(f"Subscriber removed; {self.subscriber_count} connected")

    def publish(self, event: CallEvent) -> int:
        """Deliver an event; returns the number of subscribers that received it."""
        delivered = 0
        for company_id, queue in self._subscribers:
            if company_id is not None and company_id != event.company_id:
                continue
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"Dropping {event.event} for call {event.call_id}: subscriber queue full")
        return delivered

    async def stream(self, company_id: Optional[int] = None) -> AsyncIterator[CallEvent]:
        """Subscribe and yield events until the consumer stops iterating."""
        queue = self.subscribe(company_id)
        try:
            while True:
                yield await queue.get()
        finally:
            self.unsubscribe(queue)


_broker: Optional[CallEventBroker] = None


def get_event_broker() -> CallEventBroker:
    global _broker
    if _broker is None:
        _broker = CallEventBroker()
    return _broker
