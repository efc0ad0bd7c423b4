"""
Call handling service.

Implements the Twilio voice webhook (customer profile and call record upkeep,
routing to the first online human agent), ending calls, starting live
transcription streams, and transcript line capture. Every change to a call is
published on the call event feed.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database.base import utc_now
from lyriq.core.database.entities.calls import Call, CallTranscriptLine
from lyriq.core.database.entities.customer_profiles import CustomerProfile
from lyriq.core.database.repositories import (
    AIAgentRepository,
    CallRepository,
    CompanyRepository,
    CustomerProfileRepository,
    HumanAgentRepository,
)
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import CallDirection, CallStatus
from lyriq.core.models.io.calls import CallRead, TranscriptionResult, TwilioVoiceWebhook
from lyriq.voice import TelephonyCallNotFound, TelephonyError, TelephonyNotConfiguredError, TwilioTelephony
from lyriq.voice.telephony import all_agents_busy_twiml, connect_to_agent_twiml, empty_twiml

from .errors import NotFoundError
from .events import CallEvent, CallEventBroker

logger = get_logger(__name__)

_KNOWN_STATUSES = {s.value for s in CallStatus}

# Twilio statuses that mean the call can no longer be streamed
_TWILIO_TO_LOCAL_STATUS = {
    "completed": CallStatus.completed.value,
    "failed": CallStatus.failed.value,
    "busy": CallStatus.failed.value,
    "no-answer": CallStatus.failed.value,
    "canceled": CallStatus.failed.value,
}

_STREAMABLE_TWILIO_STATUSES = ("in-progress", "ringing")


def local_status_for_twilio(twilio_status: str) -> str:
    """Local status recorded when Twilio reports a call that cannot be transcribed."""
    return _TWILIO_TO_LOCAL_STATUS.get(twilio_status, CallStatus.failed.value)


def normalize_direction(direction: Optional[str]) -> str:
    # Twilio reports outbound legs as outbound-api / outbound-dial
    if direction and direction.startswith("outbound"):
        return CallDirection.outbound.value
    return CallDirection.inbound.value


class CallService:
    """Business logic around call records.

    Args:
        session: Database session used for the whole request
        broker: Event feed notified of call changes, optional
        telephony: Twilio adapter, optional; without it Twilio side effects are skipped
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        broker: Optional[CallEventBroker] = None,
        telephony: Optional[TwilioTelephony] = None,
    ) -> None:
        self.session = session
        self.broker = broker
        self.telephony = telephony
        self.calls = CallRepository(session)
        self.profiles = CustomerProfileRepository(session)
        self.human_agents = HumanAgentRepository(session)
        self.ai_agents = AIAgentRepository(session)
        self.companies = CompanyRepository(session)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _publish_call(self, call: Call) -> None:
        if self.broker is None:
            return
        self.broker.publish(
            CallEvent(
                event="call_updated",
                company_id=call.company_id,
                call_id=call.id,
                data=CallRead.model_validate(call).model_dump(mode="json"),
            )
        )

    def _publish_transcript(self, call: Call, line: CallTranscriptLine) -> None:
        if self.broker is None:
            return
        self.broker.publish(
            CallEvent(
                event="transcript_added",
                company_id=call.company_id,
                call_id=call.id,
                data={"id": line.id, "speaker": line.speaker, "text": line.text},
            )
        )

    async def _get_call(self, call_id: int) -> Call:
        call = await self.calls.get_by_id(call_id)
        if call is None:
            raise NotFoundError("Call", call_id)
        return call

    # ------------------------------------------------------------------
    # Voice webhook
    # ------------------------------------------------------------------

    async def _resolve_company(self, dialled_number: Optional[str]) -> tuple[Optional[int], Optional[int]]:
        """Company and AI agent owning the dialled number, when it is registered."""
        if not dialled_number:
            return None, None
        agent = await self.ai_agents.get_by_phone_number(dialled_number)
        if agent is not None:
            return agent.company_id, agent.id
        company = await self.companies.get_by_phone(dialled_number)
        return (company.id if company else None), None

    async def _touch_profile(
        self, phone_number: str, caller_name: Optional[str], company_id: Optional[int]
    ) -> CustomerProfile:
        profile = await self.profiles.get_by_phone(phone_number)
        now = utc_now()
        if profile is None:
            profile = CustomerProfile(
                phone_number=phone_number,
                name=caller_name or None,
                company_id=company_id,
                call_history_count=1,
                last_interaction_at=now,
            )
            logger.info(f"Creating customer profile for {phone_number}")
            return await self.profiles.create(profile)
        profile.call_history_count += 1
        profile.last_interaction_at = now
        return await self.profiles.update(profile)

    async def handle_voice_webhook(
        self,
        form: TwilioVoiceWebhook,
        *,
        stream_url: str,
        recording_status_callback: Optional[str] = None,
    ) -> str:
        """Record the call event and return the TwiML Twilio should execute.

        Args:
            form: Parsed webhook form
            stream_url: Media stream URL for live transcription
            recording_status_callback: URL Twilio notifies when a recording is ready

        Returns:
            TwiML document as a string
        """
        direction = normalize_direction(form.direction)
        customer_number = form.to_number if direction == CallDirection.outbound.value else form.from_number
        dialled_number = form.from_number if direction == CallDirection.outbound.value else form.to_number
        company_id, ai_agent_id = await self._resolve_company(dialled_number)

        profile = None
        if form.from_number:
            profile = await self._touch_profile(form.from_number, form.caller_name, company_id)

        status = form.call_status if form.call_status in _KNOWN_STATUSES else None
        call = await self.calls.get_by_twilio_sid(form.call_sid)
        if call is None:
            call = Call(
                twilio_call_sid=form.call_sid,
                company_id=company_id,
                ai_agent_id=ai_agent_id,
                customer_number=customer_number,
                customer_name=form.caller_name or None,
                direction=direction,
                status=status or CallStatus.queued.value,
                customer_profile_id=profile.id if profile else None,
                started_at=utc_now(),
            )
            call = await self.calls.create(call)
        else:
            if status:
                call.status = status
            call.direction = direction
            if customer_number:
                call.customer_number = customer_number
            if profile is not None and call.customer_profile_id is None:
                call.customer_profile_id = profile.id
            if call.status in (CallStatus.completed.value, CallStatus.failed.value) and call.ended_at is None:
                call.ended_at = utc_now()
            call = await self.calls.update(call)
        logger.info(f"Voice webhook: call {form.call_sid} is {call.status} ({direction})")

        if form.call_status == CallStatus.ringing.value and direction == CallDirection.inbound.value:
            agent = await self.human_agents.first_online(company_id)
            if agent is None:
                logger.info(f"No online agent for call {form.call_sid}")
                self._publish_call(call)
                return all_agents_busy_twiml()
            call.agent_id = agent.id
            call = await self.calls.update(call)
            logger.info(f"Assigned call {form.call_sid} to agent {agent.id} ({agent.name})")
            self._publish_call(call)
            return connect_to_agent_twiml(stream_url, recording_status_callback)

        self._publish_call(call)
        return empty_twiml()

    # ------------------------------------------------------------------
    # Call lifecycle
    # ------------------------------------------------------------------

    async def end_call(self, call_id: int) -> Call:
        call = await self._get_call(call_id)
        if call.twilio_call_sid and call.status != CallStatus.completed.value:
            if self.telephony is None:
                logger.warning(f"Twilio not configured; ending call {call_id} locally only")
            else:
                try:
                    await self.telephony.hang_up(call.twilio_call_sid)
                except TelephonyError as e:
                    logger.warning(f"Failed to hang up Twilio call {call.twilio_call_sid}: {e}")
        call.status = CallStatus.completed.value
        call.ended_at = utc_now()
        call = await self.calls.update(call)
        logger.info(f"Call {call_id} ended")
        self._publish_call(call)
        return call

    async def start_transcription(self, call_id: int, *, stream_url: str) -> TranscriptionResult:
        """Start dual media streams on a live call.

        Returns a result with ``success=False`` when Twilio rejects the request;
        the caller reports that as a client error.
        """
        call = await self._get_call(call_id)
        if not call.twilio_call_sid:
            return TranscriptionResult(
                success=True,
                call_id=call.id,
                has_transcription=False,
                message="Call found but no Twilio SID available for transcription",
            )
        if self.telephony is None:
            raise TelephonyNotConfiguredError()

        try:
            info = await self.telephony.fetch_call_status(call.twilio_call_sid)
            if info.status not in _STREAMABLE_TWILIO_STATUSES:
                call.status = local_status_for_twilio(info.status)
                call.ended_at = utc_now()
                call = await self.calls.update(call)
                logger.info(f"Call {call_id} is {info.status} on Twilio; marked {call.status}")
                self._publish_call(call)
                return TranscriptionResult(
                    success=True,
                    call_id=call.id,
                    has_transcription=False,
                    message=f"Call status is {info.status}, transcription not available",
                    twilio_status=info.status,
                )
            streams = await self.telephony.start_dual_streams(call.twilio_call_sid, stream_url)
        except TelephonyError as e:
            logger.error(f"Failed to start transcription for call {call_id}: {e}")
            if isinstance(e, TelephonyCallNotFound):
                call.status = CallStatus.failed.value
                call.ended_at = utc_now()
                call = await self.calls.update(call)
                self._publish_call(call)
            return TranscriptionResult(
                success=False,
                call_id=call.id,
                has_transcription=False,
                error=f"Failed to start transcription: {e}",
            )

        return TranscriptionResult(
            success=True,
            call_id=call.id,
            has_transcription=True,
            message="Transcription started (dual streams)",
            inbound_stream_sid=streams.inbound_stream_sid,
            outbound_stream_sid=streams.outbound_stream_sid,
        )

    # ------------------------------------------------------------------
    # Transcript lines
    # ------------------------------------------------------------------

    async def add_transcript_line(self, call_id: int, speaker: str, text: str) -> CallTranscriptLine:
        call = await self._get_call(call_id)
        line = await self.calls.add_transcript_line(call.id, speaker, text)
        self._publish_transcript(call, line)
        return line

    async def list_transcript(self, call_id: int) -> List[CallTranscriptLine]:
        await self._get_call(call_id)
        return await self.calls.list_transcript(call_id)

    async def update_call(self, call_id: int, changes: dict) -> Call:
        call = await self._get_call(call_id)
        for key, value in changes.items():
            setattr(call, key, value)
        if call.status in (CallStatus.completed.value, CallStatus.failed.value) and call.ended_at is None:
            call.ended_at = utc_now()
        call = await self.calls.update(call)
        self._publish_call(call)
        return call
