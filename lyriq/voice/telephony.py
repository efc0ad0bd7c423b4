"""
Twilio telephony adapter.

Wraps the blocking ``twilio`` REST client for use from async code and builds
the TwiML documents returned to Twilio's voice webhook.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client
from twilio.twiml.voice_response import Dial, Start, VoiceResponse

from .errors import TelephonyCallNotFound, TelephonyError, TelephonyNotConfiguredError

CONNECTING_MESSAGE = "Connecting you to our agent."
ALL_AGENTS_BUSY_MESSAGE = "All our agents are currently busy. Please try again later."
AGENT_CLIENT_IDENTITY = "agent"
DIAL_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class TwilioCallInfo:
    sid: str
    status: str
    direction: Optional[str] = None


@dataclass(frozen=True)
class TranscriptionStreams:
    inbound_stream_sid: str
    outbound_stream_sid: str


class TwilioTelephony:
    """
    Async facade over the Twilio REST client.

    Responsibilities:
    - fetch_call_status
    - hang_up
    - start_dual_streams (separate customer and agent audio for transcription)

    Twilio REST failures surface as ``TelephonyError``; an unknown call SID as
    ``TelephonyCallNotFound``.
    """

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        *,
        client: Optional[Client] = None,
    ) -> None:
        if client is None and not (account_sid and auth_token):
            raise TelephonyNotConfiguredError()
        self._client = client or Client(account_sid, auth_token)
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _translate(e: TwilioRestException) -> TelephonyError:
        error_cls = TelephonyCallNotFound if e.status == 404 else TelephonyError
        return error_cls(e.msg or str(e), status_code=e.status, details=getattr(e, "code", None))

    async def _run(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except TwilioRestException as e:
            raise self._translate(e) from e

    async def fetch_call_status(self, call_sid: str) -> TwilioCallInfo:
        self._logger.debug("TwilioTelephony.fetch_call_status: %s", call_sid)
        call = await self._run(self._client.calls(call_sid).fetch)
        return TwilioCallInfo(sid=call_sid, status=call.status, direction=getattr(call, "direction", None))

    async def hang_up(self, call_sid: str) -> None:
        self._logger.debug("TwilioTelephony.hang_up: %s", call_sid)
        await self._run(self._client.calls(call_sid).update, status="completed")

    async def start_dual_streams(self, call_sid: str, stream_url: str) -> TranscriptionStreams:
        """Start one media stream per audio track so speakers stay separable.

        Args:
            call_sid: Twilio call SID
            stream_url: WebSocket URL receiving the audio

        Returns:
            SIDs of the inbound (customer) and outbound (agent) streams
        """
        timestamp = int(time.time() * 1000)
        streams = self._client.calls(call_sid).streams
        inbound, outbound = await asyncio.gather(
            self._run(
                streams.create,
                url=stream_url,
                name=f"transcription-inbound-{call_sid}-{timestamp}",
                track="inbound_track",
            ),
            self._run(
                streams.create,
                url=stream_url,
                name=f"transcription-outbound-{call_sid}-{timestamp}",
                track="outbound_track",
            ),
        )
        self._logger.info("Started transcription streams %s / %s for call %s", inbound.sid, outbound.sid, call_sid)
        return TranscriptionStreams(inbound_stream_sid=inbound.sid, outbound_stream_sid=outbound.sid)


# ---------------------------------------------------------------------
# TwiML
# ---------------------------------------------------------------------


def connect_to_agent_twiml(stream_url: str, recording_status_callback: Optional[str] = None) -> str:
    """Greet the caller, start the audio stream and ring the agent's browser client."""
    response = VoiceResponse()
    response.say(CONNECTING_MESSAGE, voice="alice")

    start = Start()
    start.stream(url=stream_url)
    response.append(start)

    dial_kwargs = {"timeout": DIAL_TIMEOUT_SECONDS, "record": "record-from-ringing"}
    if recording_status_callback:
        dial_kwargs["recording_status_callback"] = recording_status_callback
    dial = Dial(**dial_kwargs)
    dial.client(AGENT_CLIENT_IDENTITY)
    response.append(dial)
    return str(response)


def all_agents_busy_twiml() -> str:
    response = VoiceResponse()
    response.say(ALL_AGENTS_BUSY_MESSAGE, voice="alice")
    response.hangup()
    return str(response)


def empty_twiml() -> str:
    return str(VoiceResponse())
