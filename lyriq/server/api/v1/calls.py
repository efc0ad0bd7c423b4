"""
API endpoints for calls.

Lists and updates call records, ends live calls, starts live transcription
on Twilio, fetches VAPI transcripts, captures transcript lines and streams
call changes to dashboards over Server-Sent Events.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from lyriq.core.database.entities.calls import Call
from lyriq.core.database.repositories import CallRepository, CompanyRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.domain.enums import CallDirection, CallStatus
from lyriq.core.models.io.calls import (
    CallCreate,
    CallRead,
    CallUpdate,
    EndCallResult,
    TranscriptionResult,
    TranscriptLineCreate,
    TranscriptLineRead,
)
from lyriq.server.core.config import settings
from lyriq.server.services.calls import CallService
from lyriq.server.services.deps import EventBrokerDep, OptionalTelephonyDep, SessionDep, VapiClientDep
from lyriq.voice import VapiCallTranscript

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=List[CallRead],
    summary="List Calls",
    description="List calls, newest first, filtered by company, status and direction.",
)
async def list_calls(
    session: SessionDep,
    company_id: Optional[int] = None,
    call_status: Optional[CallStatus] = None,
    direction: Optional[CallDirection] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[CallRead]:
    calls = await CallRepository(session).list(
        limit=limit,
        offset=offset,
        filters={
            "company_id": company_id,
            "status": call_status.value if call_status else None,
            "direction": direction.value if direction else None,
        },
    )
    return [CallRead.model_validate(c) for c in calls]


@router.post(
    "",
    response_model=CallRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Call",
    description="Record a call that did not arrive through the Twilio webhook.",
    responses={404: {"description": "Company not found"}},
)
async def create_call(data: CallCreate, session: SessionDep) -> CallRead:
    if not await CompanyRepository(session).get_by_id(data.company_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Company {data.company_id} not found")
    call = await CallRepository(session).create(Call(**data.model_dump()))
    return CallRead.model_validate(call)


@router.get(
    "/stream",
    summary="Stream Call Events",
    description="Stream call updates and new transcript lines via Server-Sent Events.",
    response_description="SSE stream of `call_updated` and `transcript_added` events.",
    responses={200: {"description": "Stream established", "content": {"text/event-stream": {}}}},
)
async def stream_call_events(request: Request, broker: EventBrokerDep, company_id: Optional[int] = None):
    """
    Stream call events.

    - **company_id**: Only events of this company; all companies when omitted.

    Each event's name is the event type and its data the JSON-encoded event.
    The connection stays open until the client disconnects.
    """
    logger.info(f"Starting call event stream for company: {company_id}")

    async def event_generator():
        events = broker.stream(company_id)
        try:
            async for event in events:
                if await request.is_disconnected():
                    logger.info(f"Client disconnected from call event stream for company: {company_id}")
                    return
                yield {"event": event.event, "data": event.model_dump_json()}
        finally:
            await events.aclose()

    return EventSourceResponse(event_generator())


@router.get(
    "/vapi/{vapi_call_id}/transcript",
    response_model=VapiCallTranscript,
    summary="Get VAPI Transcript",
    description="Fetch the transcript, summary and outcome of a VAPI call.",
    responses={
        404: {"description": "VAPI does not know the call"},
        502: {"description": "VAPI request failed"},
        503: {"description": "VAPI is not configured"},
    },
)
async def get_vapi_transcript(vapi_call_id: str, vapi: VapiClientDep) -> VapiCallTranscript:
    """
    Get a VAPI transcript.

    **duration** is the number of whole seconds between start and end, or null
    when either is unknown.
    """
    return await vapi.get_transcript(vapi_call_id)


@router.get(
    "/{call_id}",
    response_model=CallRead,
    summary="Get Call",
    responses={404: {"description": "Call not found"}},
)
async def get_call(call_id: int, session: SessionDep) -> CallRead:
    call = await CallRepository(session).get_by_id(call_id)
    if not call:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Call {call_id} not found")
    return CallRead.model_validate(call)


@router.patch(
    "/{call_id}",
    response_model=CallRead,
    summary="Update Call",
    description="Update status, agent, summary, outcome or recording of a call. Finished calls get an end time.",
    responses={404: {"description": "Call not found"}},
)
async def update_call(call_id: int, data: CallUpdate, session: SessionDep, broker: EventBrokerDep) -> CallRead:
    call = await CallService(session, broker=broker).update_call(call_id, data.model_dump(exclude_unset=True))
    return CallRead.model_validate(call)


@router.post(
    "/{call_id}/end",
    response_model=EndCallResult,
    summary="End Call",
    description="Hang up the call on Twilio when it is still live and mark it completed.",
    responses={404: {"description": "Call not found"}},
)
async def end_call(
    call_id: int, session: SessionDep, broker: EventBrokerDep, telephony: OptionalTelephonyDep
) -> EndCallResult:
    """
    End a call.

    Twilio failures while hanging up are logged and do not prevent the call
    from being marked completed.
    """
    call = await CallService(session, broker=broker, telephony=telephony).end_call(call_id)
    return EndCallResult(success=True, call=CallRead.model_validate(call))


@router.post(
    "/{call_id}/transcription",
    response_model=TranscriptionResult,
    summary="Start Live Transcription",
    description="Start inbound and outbound media streams on a live Twilio call.",
    responses={
        400: {"description": "Twilio rejected the request", "model": TranscriptionResult},
        404: {"description": "Call not found"},
        503: {"description": "Twilio is not configured"},
    },
)
async def start_transcription(
    call_id: int, session: SessionDep, broker: EventBrokerDep, telephony: OptionalTelephonyDep
):
    """
    Start live transcription.

    Calls without a Twilio SID, or that are no longer ringing or in progress,
    return `has_transcription: false` with an explanatory message. When Twilio
    reports the call as unknown it is marked failed.
    """
    service = CallService(session, broker=broker, telephony=telephony)
    result = await service.start_transcription(call_id, stream_url=settings.twilio.media_stream_url)
    if not result.success:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.model_dump(mode="json"))
    return result


@router.get(
    "/{call_id}/transcript",
    response_model=List[TranscriptLineRead],
    summary="List Transcript Lines",
    responses={404: {"description": "Call not found"}},
)
async def list_transcript(call_id: int, session: SessionDep) -> List[TranscriptLineRead]:
    lines = await CallService(session).list_transcript(call_id)
    return [TranscriptLineRead.model_validate(line) for line in lines]


@router.post(
    "/{call_id}/transcript",
    response_model=TranscriptLineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Transcript Line",
    description="Append a transcript line and publish it on the call event stream.",
    responses={404: {"description": "Call not found"}},
)
async def add_transcript_line(
    call_id: int, data: TranscriptLineCreate, session: SessionDep, broker: EventBrokerDep
) -> TranscriptLineRead:
    line = await CallService(session, broker=broker).add_transcript_line(call_id, data.speaker, data.text)
    return TranscriptLineRead.model_validate(line)
