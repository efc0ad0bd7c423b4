"""Domain enums for the contact center models."""

from __future__ import annotations

from enum import Enum


class AgentStatus(str, Enum):
    """Whether an AI agent takes calls."""

    active = "active"
    inactive = "inactive"


class HumanAgentStatus(str, Enum):
    """Availability of a human agent for transfers and chat takeover."""

    online = "online"
    offline = "offline"
    busy = "busy"
    away = "away"


class CallStatus(str, Enum):
    """
    Call lifecycle status.

    Values follow Twilio's call status vocabulary so webhook payloads can be
    stored without translation.
    """

    queued = "queued"
    ringing = "ringing"
    in_progress = "in-progress"
    completed = "completed"
    failed = "failed"
    busy = "busy"
    no_answer = "no-answer"
    canceled = "canceled"


ACTIVE_CALL_STATUSES = (CallStatus.queued.value, CallStatus.ringing.value, CallStatus.in_progress.value)
FINISHED_CALL_STATUSES = (
    CallStatus.completed.value,
    CallStatus.failed.value,
    CallStatus.busy.value,
    CallStatus.no_answer.value,
    CallStatus.canceled.value,
)


class CallDirection(str, Enum):
    inbound = "inbound"
    outbound = "outbound"


class ChatSessionStatus(str, Enum):
    """Chat session state. Escalated and closed sessions never get AI answers."""

    active = "active"
    escalated = "escalated"
    closed = "closed"


class MessageSender(str, Enum):
    """Who wrote a chat message."""

    user = "user"
    ai = "ai"
    agent = "agent"
    system = "system"


class WorkflowStatus(str, Enum):
    """Workflow definition status."""

    active = "active"
    inactive = "inactive"


class WorkflowType(str, Enum):
    """Kinds of workflows started on the orchestration bridge."""

    call_handling = "call-handling"
    lead_processing = "lead-processing"
    integration_sync = "integration-sync"
    vapi_call = "vapi-call"


class WorkflowExecutionStatus(str, Enum):
    """Execution status as reported by the orchestration bridge."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    TERMINATED = "TERMINATED"
    TIMED_OUT = "TIMED_OUT"


class IntegrationProvider(str, Enum):
    salesforce = "salesforce"
    hubspot = "hubspot"
    zoho = "zoho"
    pipedrive = "pipedrive"
    zendesk = "zendesk"
    whatsapp = "whatsapp"
    email = "email"
    avaya = "avaya"
    custom = "custom"


# Providers the bridge's integration-sync workflow knows how to sync
SYNCABLE_PROVIDERS = (
    IntegrationProvider.salesforce.value,
    IntegrationProvider.hubspot.value,
    IntegrationProvider.zendesk.value,
    IntegrationProvider.zoho.value,
    IntegrationProvider.pipedrive.value,
    IntegrationProvider.whatsapp.value,
)


class IntegrationStatus(str, Enum):
    connected = "connected"
    disconnected = "disconnected"
    error = "error"


class SyncDirection(str, Enum):
    inbound = "inbound"
    outbound = "outbound"
    bidirectional = "bidirectional"


class MappingDirection(str, Enum):
    """
    Direction of a single field mapping.

    ``outbound`` pushes a local value to the remote system, ``inbound`` pulls a
    remote value into a local field.
    """

    outbound = "outbound"
    inbound = "inbound"
    bidirectional = "bidirectional"


class SyncLogStatus(str, Enum):
    success = "success"
    partial = "partial"
    failed = "failed"
