"""Knowledge base I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class KnowledgeEntryRead(BaseModel):
    id: int
    company_id: int
    title: str
    content: str
    category: Optional[str] = None
    collection: str
    has_embedding: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class KnowledgeEntryCreate(BaseModel):
    company_id: int
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: Optional[str] = None
    collection: str = Field(default="faq", description="Knowledge collection id")


class KnowledgeEntryUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    collection: Optional[str] = None


class KnowledgeImportItem(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: Optional[str] = None
    collection: str = "faq"


class KnowledgeBulkImport(BaseModel):
    """Entries to import; the built-in starter set is used when omitted."""

    company_id: int
    entries: Optional[List[KnowledgeImportItem]] = None


class KnowledgeCountResult(BaseModel):
    company_id: int
    count: int


class KnowledgeCollectionCounts(BaseModel):
    company_id: int
    collections: Dict[str, int]


class KnowledgeSearchRequest(BaseModel):
    company_id: int
    query: str = Field(min_length=1)
    collections: Optional[List[str]] = None


class KnowledgeSearchHit(BaseModel):
    id: int
    title: str
    content: str
    category: Optional[str] = None
    collection: str
    similarity: float
