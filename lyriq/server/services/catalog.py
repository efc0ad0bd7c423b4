"""Validation of agent and workflow selections against the static catalogs."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from lyriq.core.models.domain.catalog import (
    AGENT_INTEGRATIONS,
    AGENT_TOOLS,
    END_OF_CALL_ACTIONS,
    POST_CALL_ACTIONS,
    TRIGGER_SOURCES,
    VOICE_PROVIDERS,
    WORKFLOW_ACTIONS,
    CatalogItem,
    catalog_ids,
    unknown_ids,
    voices_for,
)

from .errors import InvalidRequestError


def ensure_known(field: str, values: Optional[Iterable[str]], items: Sequence[CatalogItem]) -> None:
    if values is None:
        return
    unknown = unknown_ids(values, items)
    if unknown:
        raise InvalidRequestError(
            f"Unknown {field}: {', '.join(unknown)}",
            details={"field": field, "unknown": unknown, "allowed": sorted(catalog_ids(items))},
        )


def ensure_voice(provider: Optional[str], voice_id: Optional[str]) -> None:
    """Check the provider exists and, when given, that it offers the voice."""
    if provider is None:
        return
    if provider not in catalog_ids(VOICE_PROVIDERS):
        raise InvalidRequestError(f"Unknown voice_provider: {provider}")
    if voice_id is not None and voice_id not in voices_for(provider):
        raise InvalidRequestError(f"Voice {voice_id} is not offered by {provider}")


def validate_agent_selection(data: dict) -> None:
    """Validate the catalog-backed fields of an AI agent create/update payload."""
    ensure_voice(data.get("voice_provider"), data.get("voice_id"))
    ensure_known("tools", data.get("tools"), AGENT_TOOLS)
    ensure_known("end_of_call_actions", data.get("end_of_call_actions"), END_OF_CALL_ACTIONS)
    ensure_known("integrations", data.get("integrations"), AGENT_INTEGRATIONS)


def validate_workflow_selection(data: dict, *, webhook_url: Optional[str] = None) -> None:
    """Validate trigger source and actions of a workflow create/update payload.

    ``webhook_url`` is the effective URL after the update is applied.
    """
    trigger_source = data.get("trigger_source")
    if trigger_source is not None:
        ensure_known("trigger_source", [trigger_source], TRIGGER_SOURCES)
    ensure_known("actions", data.get("actions"), WORKFLOW_ACTIONS)
    ensure_known("post_call_actions", data.get("post_call_actions"), POST_CALL_ACTIONS)
    if trigger_source == "webhook" and not webhook_url:
        raise InvalidRequestError("webhook_url is required for webhook-triggered workflows")
