"""Voice platform adapters: Twilio telephony and the VAPI call API."""

from .errors import (
    TelephonyCallNotFound,
    TelephonyError,
    TelephonyNotConfiguredError,
    VapiApiError,
    VapiNotConfiguredError,
    VoiceProviderError,
)
from .telephony import TwilioTelephony
from .vapi import VapiCallTranscript, VapiClient

__all__ = [
    "TelephonyCallNotFound",
    "TelephonyError",
    "TelephonyNotConfiguredError",
    "TwilioTelephony",
    "VapiApiError",
    "VapiCallTranscript",
    "VapiClient",
    "VapiNotConfiguredError",
    "VoiceProviderError",
]
