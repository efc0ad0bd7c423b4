"""
API endpoints for the knowledge base.

Entries are short articles the chatbot retrieves by semantic similarity.
When an OpenAI key is configured each entry is embedded on write; without
one entries are stored unembedded and searching is unavailable.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from lyriq.core.database.repositories import KnowledgeBaseRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.io.knowledge_base import (
    KnowledgeBulkImport,
    KnowledgeCollectionCounts,
    KnowledgeCountResult,
    KnowledgeEntryCreate,
    KnowledgeEntryRead,
    KnowledgeEntryUpdate,
    KnowledgeSearchHit,
    KnowledgeSearchRequest,
)
from lyriq.server.services.deps import OptionalLLMDep, SessionDep
from lyriq.server.services.knowledge import KnowledgeService

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=KnowledgeEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Knowledge Entry",
    responses={404: {"description": "Company not found"}},
)
async def create_entry(data: KnowledgeEntryCreate, session: SessionDep, llm: OptionalLLMDep) -> KnowledgeEntryRead:
    """
    Create a knowledge base entry.

    - **title** / **content**: The article; both are embedded together.
    - **category**: Free-form grouping shown to the model.
    - **collection**: Collection the entry belongs to (faq, products, policies, ...).
    """
    payload = data.model_dump(exclude={"company_id"})
    entry = await KnowledgeService(session, llm).create(data.company_id, payload)
    return KnowledgeEntryRead.model_validate(entry)


@router.get(
    "",
    response_model=List[KnowledgeEntryRead],
    summary="List Knowledge Entries",
    description="List a company's entries ordered by title, optionally within one collection.",
)
async def list_entries(
    company_id: int,
    session: SessionDep,
    collection: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[KnowledgeEntryRead]:
    entries = await KnowledgeBaseRepository(session).list(
        limit=limit, offset=offset, filters={"company_id": company_id, "collection": collection}
    )
    return [KnowledgeEntryRead.model_validate(e) for e in entries]


@router.post(
    "/import",
    response_model=KnowledgeCountResult,
    status_code=status.HTTP_201_CREATED,
    summary="Bulk Import Entries",
    description="Import the given entries, or the built-in starter set when no entries are sent.",
    responses={404: {"description": "Company not found"}},
)
async def bulk_import(data: KnowledgeBulkImport, session: SessionDep, llm: OptionalLLMDep) -> KnowledgeCountResult:
    items = [item.model_dump() for item in data.entries] if data.entries is not None else None
    count = await KnowledgeService(session, llm).bulk_import(data.company_id, items)
    return KnowledgeCountResult(company_id=data.company_id, count=count)


@router.delete(
    "",
    response_model=KnowledgeCountResult,
    summary="Clear Knowledge Base",
    description="Delete every entry of a company.",
    response_description="Number of deleted entries.",
)
async def clear_entries(company_id: int, session: SessionDep) -> KnowledgeCountResult:
    count = await KnowledgeService(session).clear(company_id)
    return KnowledgeCountResult(company_id=company_id, count=count)


@router.get(
    "/collections",
    response_model=KnowledgeCollectionCounts,
    summary="Count Entries per Collection",
)
async def collection_counts(company_id: int, session: SessionDep) -> KnowledgeCollectionCounts:
    collections = await KnowledgeService(session).collections(company_id)
    return KnowledgeCollectionCounts(company_id=company_id, collections=collections)


@router.post(
    "/search",
    response_model=List[KnowledgeSearchHit],
    summary="Search Knowledge Base",
    description="Semantic search over a company's embedded entries; best matches first.",
    responses={503: {"description": "OpenAI is not configured"}},
)
async def search_entries(
    data: KnowledgeSearchRequest, session: SessionDep, llm: OptionalLLMDep
) -> List[KnowledgeSearchHit]:
    """
    Search the knowledge base.

    Returns at most three entries whose cosine similarity to the query is at
    least 0.7, the same retrieval the chatbot uses.
    """
    matches = await KnowledgeService(session, llm).search(data.company_id, data.query, collections=data.collections)
    return [
        KnowledgeSearchHit(
            id=m.entry.id,
            title=m.entry.title,
            content=m.entry.content,
            category=m.entry.category,
            collection=m.entry.collection,
            similarity=round(m.similarity, 4),
        )
        for m in matches
    ]


@router.get(
    "/{entry_id}",
    response_model=KnowledgeEntryRead,
    summary="Get Knowledge Entry",
    responses={404: {"description": "Entry not found"}},
)
async def get_entry(entry_id: int, session: SessionDep) -> KnowledgeEntryRead:
    return KnowledgeEntryRead.model_validate(await KnowledgeService(session).get(entry_id))


@router.patch(
    "/{entry_id}",
    response_model=KnowledgeEntryRead,
    summary="Update Knowledge Entry",
    description="Update an entry; its embedding is recomputed when the text changes.",
    responses={404: {"description": "Entry not found"}},
)
async def update_entry(
    entry_id: int, data: KnowledgeEntryUpdate, session: SessionDep, llm: OptionalLLMDep
) -> KnowledgeEntryRead:
    entry = await KnowledgeService(session, llm).update(entry_id, data.model_dump(exclude_unset=True))
    return KnowledgeEntryRead.model_validate(entry)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Knowledge Entry",
    responses={404: {"description": "Entry not found"}},
)
async def delete_entry(entry_id: int, session: SessionDep) -> None:
    await KnowledgeService(session).delete(entry_id)
