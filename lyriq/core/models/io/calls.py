"""
Call I/O models for API requests and responses.

Includes the call record schemas, transcript lines, the live transcription
result and the form Twilio posts to the voice webhook.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from lyriq.core.models.domain.enums import CallDirection, CallStatus


class CallRead(BaseModel):
    """Schema for reading a call from API."""

    id: int
    company_id: Optional[int] = None
    customer_number: Optional[str] = None
    customer_name: Optional[str] = None
    direction: CallDirection
    status: CallStatus
    ai_agent_id: Optional[int] = None
    agent_id: Optional[int] = None
    customer_profile_id: Optional[int] = None
    workflow_id: Optional[int] = None
    twilio_call_sid: Optional[str] = None
    vapi_call_id: Optional[str] = None
    summary: Optional[str] = None
    outcome: Optional[str] = None
    recording_url: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CallCreate(BaseModel):
    """Schema for registering a call that did not arrive through a webhook."""

    model_config = ConfigDict(use_enum_values=True)

    company_id: int
    customer_number: Optional[str] = None
    customer_name: Optional[str] = None
    direction: CallDirection = CallDirection.outbound
    status: CallStatus = CallStatus.queued
    ai_agent_id: Optional[int] = None
    agent_id: Optional[int] = None
    workflow_id: Optional[int] = None
    twilio_call_sid: Optional[str] = None
    vapi_call_id: Optional[str] = None


class CallUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: Optional[CallStatus] = None
    agent_id: Optional[int] = None
    summary: Optional[str] = None
    outcome: Optional[str] = None
    recording_url: Optional[str] = None


class TranscriptLineCreate(BaseModel):
    speaker: str = Field(min_length=1, description="customer, ai or agent")
    text: str = Field(min_length=1)


class TranscriptLineRead(BaseModel):
    id: int
    call_id: int
    speaker: str
    text: str
    created_at: datetime

    class Config:
        from_attributes = True


class EndCallResult(BaseModel):
    success: bool = True
    call: CallRead


class TranscriptionResult(BaseModel):
    """Outcome of starting live transcription on a call."""

    success: bool = True
    call_id: Optional[int] = None
    has_transcription: bool = False
    message: Optional[str] = None
    twilio_status: Optional[str] = None
    inbound_stream_sid: Optional[str] = None
    outbound_stream_sid: Optional[str] = None
    error: Optional[str] = None


class TwilioVoiceWebhook(BaseModel):
    """Form fields Twilio posts to the voice webhook."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    call_sid: str = Field(alias="CallSid")
    from_number: Optional[str] = Field(default=None, alias="From")
    to_number: Optional[str] = Field(default=None, alias="To")
    call_status: Optional[str] = Field(default=None, alias="CallStatus")
    direction: Optional[str] = Field(default=None, alias="Direction")
    caller_name: Optional[str] = Field(default=None, alias="CallerName")
