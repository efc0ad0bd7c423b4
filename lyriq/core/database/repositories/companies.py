"""Company repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.companies import Company
from .base import SQLModelRepository


class CompanyRepository(SQLModelRepository[Company]):
    """Repository for company (tenant) records."""

    default_order = "name"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Company)

    async def get_by_slug(self, slug: str) -> Optional[Company]:
        result = await self.session.execute(select(Company).where(Company.slug == slug))
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Optional[Company]:
        result = await self.session.execute(select(Company).where(Company.phone == phone))
        return result.scalars().first()
