"""
Knowledge base service.

Stores short articles per company, embeds them with the configured language
model, and answers similarity searches for the chatbot. Vectors are stored as
JSON and compared in Python with cosine similarity.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.database.entities.knowledge_base import KnowledgeBaseEntry
from lyriq.core.database.repositories import CompanyRepository, KnowledgeBaseRepository
from lyriq.core.logging_config import get_logger
from lyriq.llm import LLMClient, LLMError, LLMNotConfiguredError

from .errors import NotFoundError

logger = get_logger(__name__)

MATCH_THRESHOLD = 0.7
MATCH_COUNT = 3

STARTER_ENTRIES: List[Dict[str, str]] = [
    {
        "title": "Office Hours",
        "content": "Our contact centre is open Monday to Friday, 8:30am to 5pm. Messages left outside these "
        "hours are answered on the next business day.",
        "category": "contact",
        "collection": "faq",
    },
    {
        "title": "Making a Payment",
        "content": "Payments can be made through the secure online payment portal or over the phone with an "
        "agent. If you are having difficulty paying, contact us to discuss a payment arrangement.",
        "category": "payments",
        "collection": "faq",
    },
    {
        "title": "Financial Hardship Assistance",
        "content": "If unexpected circumstances affect your ability to pay, you can apply for hardship "
        "assistance. Our team will work with you on flexible arrangements within your current means.",
        "category": "hardship",
        "collection": "policies",
    },
    {
        "title": "Raising a Complaint",
        "content": "We want to hear your feedback. Complaints can be raised through the complaint form, by "
        "email, or by asking to speak with a manager. Every complaint is reviewed and answered promptly.",
        "category": "complaints",
        "collection": "policies",
    },
    {
        "title": "Authorising a Representative",
        "content": "To let someone else discuss your account, submit a customer authorisation form. Financial "
        "counsellors and solicitors can send a letter of authority on your behalf.",
        "category": "account",
        "collection": "policies",
    },
    {
        "title": "Interpreter and Relay Services",
        "content": "Phone interpreters are available in over 150 languages, and relay services are available "
        "for customers who are deaf, hard of hearing or have a speech impairment.",
        "category": "accessibility",
        "collection": "faq",
    },
]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 when either is empty or all zeros."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


@dataclass(frozen=True)
class KnowledgeMatch:
    entry: KnowledgeBaseEntry
    similarity: float


class KnowledgeService:
    """CRUD, embedding and search over a company's knowledge base.

    The LLM client is optional: without it entries are stored unembedded and
    are invisible to similarity search until re-saved.
    """

    def __init__(self, session: AsyncSession, llm: Optional[LLMClient] = None) -> None:
        self.session = session
        self.llm = llm
        self.entries = KnowledgeBaseRepository(session)
        self.companies = CompanyRepository(session)

    async def _ensure_company(self, company_id: int) -> None:
        if await self.companies.get_by_id(company_id) is None:
            raise NotFoundError("Company", company_id)

    async def _embedding_for(self, title: str, content: str) -> Optional[str]:
        if self.llm is None:
            return None
        try:
            vector = await self.llm.embed(f"{title}: {content}")
        except LLMError as e:
            logger.warning(f"Embedding failed for '{title}', storing without vector: {e}")
            return None
        return json.dumps(vector)

    async def get(self, entry_id: int) -> KnowledgeBaseEntry:
        entry = await self.entries.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError("Knowledge base entry", entry_id)
        return entry

    async def create(self, company_id: int, data: dict) -> KnowledgeBaseEntry:
        await self._ensure_company(company_id)
        entry = KnowledgeBaseEntry(company_id=company_id, **data)
        entry.embedding = await self._embedding_for(entry.title, entry.content)
        return await self.entries.create(entry)

    async def update(self, entry_id: int, changes: dict) -> KnowledgeBaseEntry:
        entry = await self.get(entry_id)
        for key, value in changes.items():
            setattr(entry, key, value)
        if "title" in changes or "content" in changes or not entry.has_embedding:
            entry.embedding = await self._embedding_for(entry.title, entry.content)
        return await self.entries.update(entry)

    async def delete(self, entry_id: int) -> None:
        if not await self.entries.delete(entry_id):
            raise NotFoundError("Knowledge base entry", entry_id)

    async def bulk_import(self, company_id: int, items: Optional[List[dict]] = None) -> int:
        """Insert the given entries, or the starter set when none are given.

        Returns:
            Number of entries inserted
        """
        await self._ensure_company(company_id)
        source = items if items is not None else STARTER_ENTRIES
        new_entries = []
        for item in source:
            entry = KnowledgeBaseEntry(company_id=company_id, **item)
            entry.embedding = await self._embedding_for(entry.title, entry.content)
            new_entries.append(entry)
        await self.entries.create_many(new_entries)
        logger.info(f"Imported {len(new_entries)} knowledge base entries for company {company_id}")
        return len(new_entries)

    async def clear(self, company_id: int) -> int:
        deleted = await self.entries.delete_for_company(company_id)
        logger.info(f"Cleared {deleted} knowledge base entries for company {company_id}")
        return deleted

    async def collections(self, company_id: int) -> Dict[str, int]:
        return await self.entries.count_by_collection(company_id)

    async def search_by_vector(
        self,
        company_id: int,
        query_embedding: Sequence[float],
        *,
        threshold: float = MATCH_THRESHOLD,
        limit: int = MATCH_COUNT,
        collections: Optional[List[str]] = None,
    ) -> List[KnowledgeMatch]:
        """Entries at or above ``threshold`` similarity, best first, at most ``limit``."""
        candidates = await self.entries.list_with_embeddings(company_id, collections)
        matches = []
        for entry in candidates:
            score = cosine_similarity(query_embedding, entry.get_embedding())
            if score >= threshold:
                matches.append(KnowledgeMatch(entry=entry, similarity=score))
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    async def search(
        self, company_id: int, query: str, *, collections: Optional[List[str]] = None
    ) -> List[KnowledgeMatch]:
        if self.llm is None:
            raise LLMNotConfiguredError()
        embedding = await self.llm.embed(query)
        return await self.search_by_vector(company_id, embedding, collections=collections)
