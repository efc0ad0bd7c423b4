from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from twilio.base.exceptions import TwilioRestException

from lyriq.voice import TelephonyCallNotFound, TelephonyError, TelephonyNotConfiguredError, TwilioTelephony
from lyriq.voice.telephony import (
    ALL_AGENTS_BUSY_MESSAGE,
    CONNECTING_MESSAGE,
    all_agents_busy_twiml,
    connect_to_agent_twiml,
    empty_twiml,
)


@pytest.fixture
def twilio_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def telephony(twilio_client) -> TwilioTelephony:
    return TwilioTelephony(None, None, client=twilio_client)


class TestTwilioTelephony:
    def test_requires_credentials_without_client(self):
        with pytest.raises(TelephonyNotConfiguredError):
            TwilioTelephony(None, "token")
        with pytest.raises(TelephonyNotConfiguredError):
            TwilioTelephony("AC123", "")

    async def test_fetch_call_status(self, telephony, twilio_client):
        twilio_client.calls.return_value.fetch.return_value = SimpleNamespace(status="in-progress", direction="inbound")

        info = await telephony.fetch_call_status("CA1")

        twilio_client.calls.assert_called_with("CA1")
        assert info.sid == "CA1"
        assert info.status == "in-progress"
        assert info.direction == "inbound"

    async def test_hang_up(self, telephony, twilio_client):
        await telephony.hang_up("CA1")

        twilio_client.calls.return_value.update.assert_called_once_with(status="completed")

    async def test_start_dual_streams(self, telephony, twilio_client):
        create = twilio_client.calls.return_value.streams.create
        create.side_effect = lambda **kwargs: SimpleNamespace(sid=f"MZ-{kwargs['track']}")

        streams = await telephony.start_dual_streams("CA1", "wss://media.example/stream")

        assert streams.inbound_stream_sid == "MZ-inbound_track"
        assert streams.outbound_stream_sid == "MZ-outbound_track"
        tracks = sorted(call.kwargs["track"] for call in create.call_args_list)
        assert tracks == ["inbound_track", "outbound_track"]
        for call in create.call_args_list:
            assert call.kwargs["url"] == "wss://media.example/stream"
            assert call.kwargs["name"].startswith(f"transcription-{call.kwargs['track'].split('_')[0]}-CA1-")

    async def test_unknown_call_sid(self, telephony, twilio_client):
        twilio_client.calls.return_value.fetch.side_effect = TwilioRestException(
            404, "https://api.twilio.com/Calls/CA404.json", msg="The requested resource was not found", code=20404
        )

        with pytest.raises(TelephonyCallNotFound) as exc_info:
            await telephony.fetch_call_status("CA404")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details == 20404

    async def test_other_rest_errors(self, telephony, twilio_client):
        twilio_client.calls.return_value.update.side_effect = TwilioRestException(
            400, "https://api.twilio.com/Calls/CA1.json", msg="Call is not in-progress", code=21220
        )

        with pytest.raises(TelephonyError) as exc_info:
            await telephony.hang_up("CA1")

        assert not isinstance(exc_info.value, TelephonyCallNotFound)
        assert exc_info.value.message == "Call is not in-progress"


class TestTwiml:
    def test_connect_to_agent(self):
        twiml = connect_to_agent_twiml("wss://media.example/stream", "https://lyriq.example/recordings")

        assert CONNECTING_MESSAGE in twiml
        assert '<Stream url="wss://media.example/stream"' in twiml
        assert "<Client>agent</Client>" in twiml
        assert 'timeout="30"' in twiml
        assert 'record="record-from-ringing"' in twiml
        assert 'recordingStatusCallback="https://lyriq.example/recordings"' in twiml

    def test_connect_without_recording_callback(self):
        assert "recordingStatusCallback" not in connect_to_agent_twiml("wss://media.example/stream")

    def test_all_agents_busy(self):
        twiml = all_agents_busy_twiml()
        assert ALL_AGENTS_BUSY_MESSAGE in twiml
        assert "<Hangup" in twiml

    def test_empty(self):
        twiml = empty_twiml()
        assert "<Response" in twiml
        assert "<Say" not in twiml
