"""
Knowledge base entity models.

Entries are short articles the chatbot retrieves by embedding similarity.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from ..base import Base, load_json_list, utc_now


class KnowledgeBaseEntryBase(Base):
    """Base fields for a knowledge base entry."""

    company_id: int = Field(foreign_key="companies.id", index=True)
    title: str = Field(description="Entry title")
    content: str = Field(description="Entry body")
    category: Optional[str] = Field(default=None, index=True, description="Free-form grouping, e.g. 'payments'")
    collection: str = Field(default="faq", index=True, description="Knowledge collection id")


class KnowledgeBaseEntry(KnowledgeBaseEntryBase, table=True):
    """Persistent knowledge base entry.

    Table: knowledge_base
    """

    __tablename__ = "knowledge_base"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    embedding: Optional[str] = Field(default=None, description="JSON array of floats")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_embedding(self) -> List[float]:
        return [float(v) for v in load_json_list(self.embedding)]

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def __repr__(self) -> str:
        return f"KnowledgeBaseEntry(id={self.id}, title={self.title})"
