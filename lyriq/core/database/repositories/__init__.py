"""
Repositories organized by business domain.

Each repository wraps one AsyncSession and commits per operation.
"""

from .agents import AIAgentRepository, HumanAgentRepository
from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .calls import CallRepository, CustomerProfileRepository
from .chat_sessions import ChatMessageRepository, ChatSessionRepository
from .companies import CompanyRepository
from .integrations import FieldMappingRepository, IntegrationRepository, SyncLogRepository
from .knowledge_base import KnowledgeBaseRepository
from .workflows import WorkflowExecutionRepository, WorkflowRepository

__all__ = [
    "AIAgentRepository",
    "AsyncBaseRepository",
    "CallRepository",
    "ChatMessageRepository",
    "ChatSessionRepository",
    "CompanyRepository",
    "CustomerProfileRepository",
    "FieldMappingRepository",
    "HumanAgentRepository",
    "IntegrationRepository",
    "KnowledgeBaseRepository",
    "QueryBuilder",
    "SQLModelRepository",
    "SyncLogRepository",
    "WorkflowExecutionRepository",
    "WorkflowRepository",
]
