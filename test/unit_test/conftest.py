"""Shared fixtures for unit tests: an in-memory SQLite database with every table."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from lyriq.core.database import create_all, create_sessionmaker
from lyriq.core.database.entities import Company

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create a fresh database engine per test; StaticPool keeps the in-memory database alive."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
async def company(session: AsyncSession) -> Company:
    """A persisted tenant most tests hang their records on."""
    record = Company(
        name="Acme Energy",
        slug="acme-energy",
        industry="utilities",
        phone="+61290000000",
        email="help@acme.example",
        description="Electricity and gas retailer.",
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record
