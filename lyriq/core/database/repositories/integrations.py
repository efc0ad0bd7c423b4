"""
Integration repositories.

This module provides data access for integrations, their field mappings and
sync logs.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lyriq.core.models.domain.enums import IntegrationStatus

from ..entities.integrations import FieldMapping, Integration, SyncLog
from .base import SQLModelRepository


class IntegrationRepository(SQLModelRepository[Integration]):
    """Repository for integrations."""

    default_order = "provider"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Integration)

    async def list_connected(self, company_id: int) -> List[Integration]:
        stmt = (
            select(Integration)
            .where(Integration.company_id == company_id)
            .where(Integration.status == IntegrationStatus.connected.value)
            .order_by(Integration.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, entity_id: int) -> bool:
        # Children first; SQLite does not enforce ON DELETE CASCADE by default
        await self.session.execute(delete(FieldMapping).where(FieldMapping.integration_id == entity_id))
        await self.session.execute(delete(SyncLog).where(SyncLog.integration_id == entity_id))
        return await super().delete(entity_id)


class FieldMappingRepository(SQLModelRepository[FieldMapping]):
    """Repository for integration field mappings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FieldMapping)

    async def list_for_integration(self, integration_id: int) -> List[FieldMapping]:
        return await self.list(filters={"integration_id": integration_id})

    async def create_many(self, mappings: List[FieldMapping]) -> List[FieldMapping]:
        self.session.add_all(mappings)
        await self.session.commit()
        for mapping in mappings:
            await self.session.refresh(mapping)
        return mappings


class SyncLogRepository(SQLModelRepository[SyncLog]):
    """Repository for sync logs, newest first."""

    default_order = "created_at"
    default_order_desc = True

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SyncLog)

    async def list_for_integration(self, integration_id: int, limit: int = 50) -> List[SyncLog]:
        return await self.list(limit=limit, filters={"integration_id": integration_id})
