"""
Service Dependencies.

Provides the external clients (workflow bridge, VAPI, Twilio, OpenAI) and the
call event broker to API endpoints. HTTP clients are process-wide singletons;
tests replace any of them through ``app.dependency_overrides``.
"""

from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database import get_session
from lyriq.core.logging_config import get_logger
from lyriq.llm import LLMClient, LLMNotConfiguredError, OpenAILLMClient
from lyriq.server.core.config import settings
from lyriq.voice import TelephonyNotConfiguredError, TwilioTelephony, VapiClient
from lyriq.workflow_api import WorkflowApiClient

from .events import CallEventBroker, get_event_broker

logger = get_logger(__name__)

_workflow_client: Optional[WorkflowApiClient] = None
_vapi_client: Optional[VapiClient] = None
_telephony: Optional[TwilioTelephony] = None
_llm_client: Optional[OpenAILLMClient] = None


def get_workflow_client() -> WorkflowApiClient:
    global _workflow_client
    if _workflow_client is None:
        cfg = settings.workflow_api
        _workflow_client = WorkflowApiClient(cfg.url, timeout=cfg.timeout)
    return _workflow_client


def get_vapi_client() -> VapiClient:
    global _vapi_client
    if _vapi_client is None:
        cfg = settings.vapi
        _vapi_client = VapiClient(cfg.api_key, base_url=cfg.base_url)
    return _vapi_client


def get_telephony() -> TwilioTelephony:
    """Twilio adapter; raises ``TelephonyNotConfiguredError`` without credentials."""
    global _telephony
    if _telephony is None:
        cfg = settings.twilio
        _telephony = TwilioTelephony(cfg.account_sid, cfg.auth_token)
    return _telephony


def get_optional_telephony() -> Optional[TwilioTelephony]:
    try:
        return get_telephony()
    except TelephonyNotConfiguredError:
        logger.debug("Twilio not configured; telephony actions are skipped")
        return None


def get_llm_client() -> LLMClient:
    """OpenAI client; raises ``LLMNotConfiguredError`` without an API key."""
    global _llm_client
    if _llm_client is None:
        cfg = settings.openai
        _llm_client = OpenAILLMClient(
            cfg.api_key,
            chat_model=cfg.chat_model,
            embedding_model=cfg.embedding_model,
            base_url=cfg.base_url,
        )
    return _llm_client


def get_optional_llm_client() -> Optional[LLMClient]:
    try:
        return get_llm_client()
    except LLMNotConfiguredError:
        logger.debug("OpenAI not configured; knowledge base entries are stored without embeddings")
        return None


async def close_clients() -> None:
    """Close the pooled HTTP clients; called on application shutdown."""
    global _workflow_client, _vapi_client
    if _workflow_client is not None:
        await _workflow_client.aclose()
        _workflow_client = None
    if _vapi_client is not None:
        await _vapi_client.aclose()
        _vapi_client = None


SessionDep = Annotated[AsyncSession, Depends(get_session)]
WorkflowClientDep = Annotated[WorkflowApiClient, Depends(get_workflow_client)]
VapiClientDep = Annotated[VapiClient, Depends(get_vapi_client)]
TelephonyDep = Annotated[TwilioTelephony, Depends(get_telephony)]
OptionalTelephonyDep = Annotated[Optional[TwilioTelephony], Depends(get_optional_telephony)]
LLMDep = Annotated[LLMClient, Depends(get_llm_client)]
OptionalLLMDep = Annotated[Optional[LLMClient], Depends(get_optional_llm_client)]
EventBrokerDep = Annotated[CallEventBroker, Depends(get_event_broker)]
