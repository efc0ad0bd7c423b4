from __future__ import annotations

import httpx
import pytest

from lyriq.voice import VapiApiError, VapiClient, VapiNotConfiguredError
from lyriq.voice.vapi import call_duration_seconds

VAPI_CALL = {
    "id": "vapi-1",
    "status": "ended",
    "startedAt": "2026-10-18T09:00:00.000Z",
    "endedAt": "2026-10-18T09:03:20.400Z",
    "transcript": "AI: Hello\nUser: Hi",
    "messages": [{"role": "assistant", "message": "Hello"}],
    "summary": "Customer asked about a late bill.",
    "endedReason": "customer-ended-call",
    "recordingUrl": "https://recordings.example/vapi-1.wav",
    "cost": 0.42,
}


def _vapi(handler) -> VapiClient:
    transport = httpx.MockTransport(handler)
    return VapiClient("vapi-key", base_url="http://mock-vapi/", client=httpx.AsyncClient(transport=transport))


class TestCallDuration:
    def test_rounds_seconds(self):
        assert call_duration_seconds("2026-10-18T09:00:00Z", "2026-10-18T09:00:10.6Z") == 11

    @pytest.mark.parametrize(
        "start,end", [(None, "2026-10-18T09:00:00Z"), ("2026-10-18T09:00:00Z", None), ("", "")]
    )
    def test_missing_timestamps(self, start, end):
        assert call_duration_seconds(start, end) is None

    @pytest.mark.parametrize(
        "start,end",
        [
            ("yesterday", "2026-10-18T09:00:00Z"),
            ("2026-10-18T09:00:00", "2026-10-18T09:00:10Z"),
        ],
    )
    def test_unusable_timestamps(self, start, end):
        assert call_duration_seconds(start, end) is None


class TestVapiClient:
    async def test_get_transcript(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=VAPI_CALL)

        transcript = await _vapi(handler).get_transcript("vapi-1")

        assert str(seen[0].url) == "http://mock-vapi/call/vapi-1"
        assert seen[0].headers["Authorization"] == "Bearer vapi-key"
        assert transcript.call_id == "vapi-1"
        assert transcript.duration == 200
        assert transcript.ended_reason == "customer-ended-call"
        assert transcript.cost == 0.42
        assert transcript.model_dump(by_alias=True)["recordingUrl"] == "https://recordings.example/vapi-1.wav"

    async def test_sparse_call(self):
        transcript = await _vapi(lambda r: httpx.Response(200, json={"id": "vapi-2", "summary": ""})).get_transcript(
            "vapi-2"
        )

        assert transcript.transcript == ""
        assert transcript.messages == []
        assert transcript.summary is None
        assert transcript.duration is None

    async def test_not_configured(self):
        client = VapiClient(None, base_url="http://mock-vapi")

        with pytest.raises(VapiNotConfiguredError):
            await client.get_call("vapi-1")

    async def test_http_error_keeps_status(self):
        with pytest.raises(VapiApiError) as exc_info:
            await _vapi(lambda r: httpx.Response(404, text="Not Found")).get_call("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details == "Not Found"

    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(VapiApiError) as exc_info:
            await _vapi(handler).get_call("vapi-1")

        assert exc_info.value.status_code is None

    async def test_unexpected_shape(self):
        with pytest.raises(VapiApiError, match="Unexpected response shape"):
            await _vapi(lambda r: httpx.Response(200, json=["not", "a", "call"])).get_call("vapi-1")

    async def test_non_json_body(self):
        with pytest.raises(VapiApiError, match="non-JSON") as exc_info:
            await _vapi(lambda r: httpx.Response(200, text="<html>oops</html>")).get_call("vapi-1")

        assert exc_info.value.status_code == 200
        assert exc_info.value.details == "<html>oops</html>"

    async def test_malformed_call_fields(self):
        call = {**VAPI_CALL, "startedAt": 1760778000, "messages": "none"}

        with pytest.raises(VapiApiError, match="Unexpected call fields"):
            await _vapi(lambda r: httpx.Response(200, json=call)).get_transcript("vapi-1")
