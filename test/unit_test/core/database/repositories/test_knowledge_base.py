"""Unit tests for the knowledge base repository."""

from __future__ import annotations

import pytest

from lyriq.core.database.entities import KnowledgeBaseEntry
from lyriq.core.database.repositories import KnowledgeBaseRepository


@pytest.fixture
def repository(session):
    return KnowledgeBaseRepository(session)


def _entry(company_id, title, collection="faq", embedding=None) -> KnowledgeBaseEntry:
    return KnowledgeBaseEntry(
        company_id=company_id, title=title, content=f"{title} body", collection=collection, embedding=embedding
    )


class TestKnowledgeBaseRepository:
    async def test_create_many_orders_by_title(self, repository, company):
        await repository.create_many([_entry(company.id, "Refunds"), _entry(company.id, "Billing")])

        titles = [e.title for e in await repository.list(filters={"company_id": company.id})]

        assert titles == ["Billing", "Refunds"]

    async def test_list_with_embeddings(self, repository, company):
        await repository.create_many(
            [
                _entry(company.id, "A", "faq", "[1.0, 0.0]"),
                _entry(company.id, "B", "pricing", "[0.0, 1.0]"),
                _entry(company.id, "C", "faq"),
            ]
        )

        everything = await repository.list_with_embeddings(company.id)
        assert sorted(e.title for e in everything) == ["A", "B"]

        pricing = await repository.list_with_embeddings(company.id, ["pricing"])
        assert [e.title for e in pricing] == ["B"]

    async def test_count_by_collection_and_delete(self, repository, company):
        await repository.create_many(
            [_entry(company.id, "A", "faq"), _entry(company.id, "B", "faq"), _entry(company.id, "C", "policies")]
        )

        assert await repository.count_by_collection(company.id) == {"faq": 2, "policies": 1}

        assert await repository.delete_for_company(company.id) == 3
        assert await repository.count_by_collection(company.id) == {}
