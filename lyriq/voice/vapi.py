from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .errors import VapiApiError, VapiNotConfiguredError


class VapiCallTranscript(BaseModel):
    """Transcript and outcome of a VAPI call, as returned to dashboard clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    call_id: Optional[str] = None
    status: Optional[str] = None
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    transcript: str = ""
    messages: List[Any] = Field(default_factory=list)
    summary: Optional[str] = None
    duration: Optional[int] = Field(default=None, description="Whole seconds between start and end")
    ended_reason: Optional[str] = None
    recording_url: Optional[str] = None
    cost: Optional[float] = None


_timestamp = TypeAdapter(datetime)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return _timestamp.validate_python(value)
    except ValidationError:
        return None


def call_duration_seconds(started_at: Optional[str], ended_at: Optional[str]) -> Optional[int]:
    """Rounded seconds between two ISO-8601 timestamps, or None when either is missing or unusable."""
    start = _parse_timestamp(started_at)
    end = _parse_timestamp(ended_at)
    if start is None or end is None or (start.tzinfo is None) != (end.tzinfo is None):
        return None
    return round((end - start).total_seconds())


class VapiClient:
    """
    Thin async HTTP client for the VAPI voice platform.

    Only call lookup is needed here; outbound calls are placed by the
    workflow bridge.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://api.vapi.ai",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise VapiNotConfiguredError()
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_call(self, call_id: str) -> dict:
        headers = self._headers()
        try:
            self._logger.debug("VapiClient.get_call: GET %s/call/%s", self.base_url, call_id)
            r = await self._client.get(f"{self.base_url}/call/{call_id}", headers=headers)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise VapiApiError(
                f"Failed to fetch call from VAPI: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise VapiApiError(f"VAPI unreachable: {e}") from e
        try:
            data = r.json()
        except ValueError as e:
            raise VapiApiError(
                "Unexpected non-JSON response from VAPI get_call", status_code=r.status_code, details=r.text
            ) from e
        if not isinstance(data, dict):
            raise VapiApiError("Unexpected response shape from VAPI get_call", status_code=r.status_code, details=data)
        return data

    async def get_transcript(self, call_id: str) -> VapiCallTranscript:
        data = await self.get_call(call_id)
        try:
            transcript = VapiCallTranscript(
                call_id=data.get("id"),
                status=data.get("status"),
                started_at=data.get("startedAt"),
                ended_at=data.get("endedAt"),
                transcript=data.get("transcript") or "",
                messages=data.get("messages") or [],
                summary=data.get("summary") or None,
                duration=call_duration_seconds(data.get("startedAt"), data.get("endedAt")),
                ended_reason=data.get("endedReason") or None,
                recording_url=data.get("recordingUrl") or None,
                cost=data.get("cost") or None,
            )
        except ValidationError as e:
            raise VapiApiError("Unexpected call fields from VAPI get_call", details=data) from e
        self._logger.debug(
            "VapiClient.get_transcript: call %s transcript length %d", call_id, len(transcript.transcript)
        )
        return transcript
