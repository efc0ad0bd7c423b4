"""Knowledge base repository."""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.knowledge_base import KnowledgeBaseEntry
from .base import SQLModelRepository


class KnowledgeBaseRepository(SQLModelRepository[KnowledgeBaseEntry]):
    """Repository for knowledge base entries."""

    default_order = "title"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, KnowledgeBaseEntry)

    async def create_many(self, entries: List[KnowledgeBaseEntry]) -> List[KnowledgeBaseEntry]:
        self.session.add_all(entries)
        await self.session.commit()
        for entry in entries:
            await self.session.refresh(entry)
        return entries

    async def list_with_embeddings(
        self, company_id: int, collections: Optional[List[str]] = None
    ) -> List[KnowledgeBaseEntry]:
        stmt = select(KnowledgeBaseEntry).where(
            KnowledgeBaseEntry.company_id == company_id, KnowledgeBaseEntry.embedding.is_not(None)
        )
        if collections:
            stmt = stmt.where(KnowledgeBaseEntry.collection.in_(collections))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_company(self, company_id: int) -> int:
        result = await self.session.execute(
            delete(KnowledgeBaseEntry).where(KnowledgeBaseEntry.company_id == company_id)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def count_by_collection(self, company_id: int) -> Dict[str, int]:
        stmt = (
            select(KnowledgeBaseEntry.collection, func.count())
            .where(KnowledgeBaseEntry.company_id == company_id)
            .group_by(KnowledgeBaseEntry.collection)
        )
        result = await self.session.execute(stmt)
        return {collection: int(count) for collection, count in result.all()}
