"""
Webhook Endpoints.

Receives Twilio voice status callbacks. The response body is TwiML telling
Twilio what to do with the call.
"""

from fastapi import APIRouter, Request, Response
from pydantic import ValidationError

from lyriq.core.logging_config import get_logger
from lyriq.core.models.io.calls import TwilioVoiceWebhook
from lyriq.server.core.config import settings
from lyriq.server.services.calls import CallService
from lyriq.server.services.deps import EventBrokerDep, SessionDep
from lyriq.server.services.errors import InvalidRequestError

logger = get_logger(__name__)

router = APIRouter()

TWIML_MEDIA_TYPE = "application/xml"


@router.post(
    "/twilio/voice",
    summary="Twilio Voice Webhook",
    description="Record a Twilio call event and route ringing inbound calls to the first online human agent.",
    response_description="TwiML document.",
    responses={
        200: {"description": "TwiML for Twilio", "content": {TWIML_MEDIA_TYPE: {}}},
        400: {"description": "CallSid missing from the form"},
    },
)
async def twilio_voice(request: Request, session: SessionDep, broker: EventBrokerDep) -> Response:
    """
    Handle a Twilio voice webhook.

    Form fields: **CallSid**, **From**, **To**, **CallStatus**, **Direction**,
    **CallerName**. The caller's customer profile and the call record are
    upserted on every event. A ringing inbound call is connected to an online
    agent with recording and live transcription, or told that all agents are
    busy.
    """
    form = await request.form()
    try:
        payload = TwilioVoiceWebhook.model_validate(dict(form))
    except ValidationError as e:
        logger.warning(f"Rejected Twilio voice webhook: {e.error_count()} invalid fields")
        raise InvalidRequestError("CallSid is required", details=e.errors(include_url=False)) from e

    cfg = settings.twilio
    twiml = await CallService(session, broker=broker).handle_voice_webhook(
        payload,
        stream_url=cfg.media_stream_url,
        recording_status_callback=cfg.recording_status_callback,
    )
    return Response(content=twiml, media_type=TWIML_MEDIA_TYPE)
