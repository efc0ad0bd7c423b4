"""
Database entities organized by business domain.

Importing this package registers every table on ``Base.metadata``.
"""

from .ai_agents import AIAgent
from .calls import Call, CallTranscriptLine
from .chat_sessions import ChatMessage, ChatSession
from .companies import Company
from .customer_profiles import CustomerProfile
from .human_agents import HumanAgent
from .integrations import FieldMapping, Integration, SyncLog
from .knowledge_base import KnowledgeBaseEntry
from .workflows import Workflow, WorkflowExecution

__all__ = [
    "AIAgent",
    "Call",
    "CallTranscriptLine",
    "ChatMessage",
    "ChatSession",
    "Company",
    "CustomerProfile",
    "FieldMapping",
    "HumanAgent",
    "Integration",
    "KnowledgeBaseEntry",
    "SyncLog",
    "Workflow",
    "WorkflowExecution",
]
