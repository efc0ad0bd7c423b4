"""Error types raised by the voice platform clients (Twilio, VAPI)."""

from __future__ import annotations

from typing import Any, Optional


class VoiceProviderError(Exception):
    """Base error for voice platform failures.

    Args:
        message: Human-readable error description.
        status_code: HTTP status reported by the provider, when there is one.
        details: Raw provider payload for diagnosis.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class TelephonyError(VoiceProviderError):
    """Twilio rejected or failed a request."""


class TelephonyCallNotFound(TelephonyError):
    """Twilio does not know the call SID (HTTP 404)."""


class TelephonyNotConfiguredError(TelephonyError):
    """Twilio credentials are missing."""

    def __init__(self) -> None:
        super().__init__("Twilio credentials not configured")


class VapiApiError(VoiceProviderError):
    """VAPI API answered with an error or could not be reached."""


class VapiNotConfiguredError(VapiApiError):
    """VAPI API key is missing."""

    def __init__(self) -> None:
        super().__init__("VAPI_API_KEY not configured")
