"""
Static catalogs of selectable options.

AI agent configuration and workflow definitions reference these ids; the API
rejects ids that are not listed here.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel


class CatalogItem(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None


class VoiceProviderOption(BaseModel):
    id: str
    name: str
    voices: List[str]


VOICE_PROVIDERS: List[VoiceProviderOption] = [
    VoiceProviderOption(id="elevenlabs", name="ElevenLabs", voices=["Rachel", "Josh", "Emily", "Sam", "Arnold"]),
    VoiceProviderOption(id="openai", name="OpenAI", voices=["Alloy", "Echo", "Fable", "Onyx", "Nova", "Shimmer"]),
    VoiceProviderOption(id="azure", name="Azure", voices=["Jenny", "Guy", "Aria", "Davis"]),
]

AGENT_TOOLS: List[CatalogItem] = [
    CatalogItem(id="transfer", name="Transfer to Human", description="Hand off call to human agent"),
    CatalogItem(id="order-status", name="Check Order Status", description="Look up customer order information"),
    CatalogItem(id="appointment", name="Schedule Appointment", description="Book appointments in calendar"),
    CatalogItem(id="refund", name="Process Refund", description="Initiate refund requests"),
    CatalogItem(id="send-email", name="Send Email", description="Send confirmation or follow-up emails"),
    CatalogItem(id="create-ticket", name="Create Support Ticket", description="Create tickets in helpdesk"),
    CatalogItem(id="crm-update", name="Update CRM", description="Update customer records in CRM"),
    CatalogItem(id="send-sms", name="Send SMS", description="Send text messages to customers"),
]

END_OF_CALL_ACTIONS: List[CatalogItem] = [
    CatalogItem(id="summary-crm", name="Send Call Summary to CRM", description="Automatically log call details"),
    CatalogItem(id="zendesk-ticket", name="Create Zendesk Ticket", description="Create ticket for follow-up"),
    CatalogItem(id="followup-email", name="Send Follow-up Email", description="Email call summary to customer"),
    CatalogItem(id="update-lead", name="Update Lead Status", description="Update lead in pipeline"),
    CatalogItem(id="webhook", name="Trigger Webhook", description="Send data to external system"),
    CatalogItem(id="survey", name="Send Customer Survey", description="Request CSAT feedback"),
]

KNOWLEDGE_COLLECTIONS: List[CatalogItem] = [
    CatalogItem(id="products", name="Product Knowledge"),
    CatalogItem(id="faq", name="FAQ & Common Questions"),
    CatalogItem(id="policies", name="Company Policies"),
    CatalogItem(id="troubleshooting", name="Troubleshooting Guides"),
    CatalogItem(id="pricing", name="Pricing & Plans"),
]

AGENT_INTEGRATIONS: List[CatalogItem] = [
    CatalogItem(id="zendesk", name="Zendesk", description="Create tickets, sync customer data", category="Helpdesk"),
    CatalogItem(id="salesforce", name="Salesforce", description="Log calls, update contacts & leads", category="CRM"),
    CatalogItem(id="hubspot", name="HubSpot", description="Sync contacts, log activities", category="CRM"),
    CatalogItem(id="whatsapp", name="WhatsApp Business", description="Send follow-up messages", category="Messaging"),
    CatalogItem(
        id="email", name="Email (SendGrid)", description="Send emails and notifications", category="Communication"
    ),
    CatalogItem(id="zoho", name="Zoho CRM", description="Sync leads and call logs", category="CRM"),
    CatalogItem(id="pipedrive", name="Pipedrive", description="Sync deals and activities", category="CRM"),
]

TRIGGER_SOURCES: List[CatalogItem] = [
    CatalogItem(id="hubspot", name="HubSpot", description="New or updated HubSpot record"),
    CatalogItem(id="salesforce", name="Salesforce", description="Salesforce record change"),
    CatalogItem(id="pipedrive", name="Pipedrive", description="Pipedrive deal or person event"),
    CatalogItem(id="zoho", name="Zoho CRM", description="Zoho lead event"),
    CatalogItem(id="webhook", name="Webhook", description="Inbound HTTP webhook"),
    CatalogItem(id="calendar", name="Calendar", description="Scheduled calendar event"),
    CatalogItem(id="form", name="Form Submission", description="Website form submission"),
    CatalogItem(id="manual", name="Manual", description="Run by an operator"),
]

WORKFLOW_ACTIONS: List[CatalogItem] = [
    CatalogItem(id="outbound-call", name="Outbound AI Call"),
    CatalogItem(id="send-sms", name="Send SMS"),
    CatalogItem(id="send-email", name="Send Email"),
    CatalogItem(id="update-crm", name="Update CRM Record"),
    CatalogItem(id="create-task", name="Create Task"),
    CatalogItem(id="notify-team", name="Notify Team"),
    CatalogItem(id="webhook-callback", name="Webhook Callback"),
]

POST_CALL_ACTIONS: List[CatalogItem] = [
    CatalogItem(id="log-call", name="Log Call"),
    CatalogItem(id="update-status", name="Update Status"),
    CatalogItem(id="schedule-followup", name="Schedule Follow-up"),
    CatalogItem(id="send-summary", name="Send Summary"),
    CatalogItem(id="trigger-webhook", name="Trigger Webhook"),
]

CATALOGS: Dict[str, list] = {
    "voice_providers": VOICE_PROVIDERS,
    "tools": AGENT_TOOLS,
    "end_of_call_actions": END_OF_CALL_ACTIONS,
    "knowledge_collections": KNOWLEDGE_COLLECTIONS,
    "integrations": AGENT_INTEGRATIONS,
    "trigger_sources": TRIGGER_SOURCES,
    "workflow_actions": WORKFLOW_ACTIONS,
    "post_call_actions": POST_CALL_ACTIONS,
}


def catalog_ids(items: Iterable[CatalogItem | VoiceProviderOption]) -> set[str]:
    return {item.id for item in items}


def unknown_ids(values: Iterable[str], items: Iterable[CatalogItem]) -> List[str]:
    """Return the values that are not ids of ``items``, in input order."""
    known = catalog_ids(items)
    return [value for value in values if value not in known]


def voices_for(provider_id: str) -> Optional[List[str]]:
    """Voices offered by a provider, or None when the provider is unknown."""
    for provider in VOICE_PROVIDERS:
        if provider.id == provider_id:
            return provider.voices
    return None
