"""Unit tests for the call event broker."""

from __future__ import annotations

import asyncio

from lyriq.server.services.events import CallEvent, CallEventBroker, get_event_broker


def _event(company_id=1, call_id=10, event="call_updated") -> CallEvent:
    return CallEvent(event=event, company_id=company_id, call_id=call_id, data={"status": "ringing"})


class TestCallEventBroker:
    def test_company_scoped_delivery(self):
        broker = CallEventBroker()
        acme = broker.subscribe(1)
        other = broker.subscribe(2)
        everyone = broker.subscribe()

        delivered = broker.publish(_event(company_id=1))

        assert delivered == 2
        assert acme.qsize() == 1
        assert other.empty()
        assert everyone.get_nowait().call_id == 10

    def test_full_queue_drops_event(self):
        broker = CallEventBroker(max_queue_size=1)
        queue = broker.subscribe(1)

        assert broker.publish(_event(call_id=1)) == 1
        assert broker.publish(_event(call_id=2)) == 0
        assert queue.get_nowait().call_id == 1

    def test_unsubscribe(self):
        broker = CallEventBroker()
        queue = broker.subscribe(1)
        assert broker.subscriber_count == 1

        broker.unsubscribe(queue)

        assert broker.subscriber_count == 0
        assert broker.publish(_event()) == 0

    async def test_stream_unsubscribes_when_closed(self):
        broker = CallEventBroker()
        stream = broker.stream(1)
        next_event = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        assert broker.subscriber_count == 1

        broker.publish(_event(event="transcript_added"))
        received = await next_event
        await stream.aclose()

        assert received.event == "transcript_added"
        assert broker.subscriber_count == 0

    def test_event_timestamp_is_aware(self):
        assert _event().timestamp.tzinfo is not None

    def test_singleton(self):
        assert get_event_broker() is get_event_broker()
