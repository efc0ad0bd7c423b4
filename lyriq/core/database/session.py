"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from lyriq.core.logging_config import get_logger
from lyriq.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    Verifies connectivity. Tables are created here only when
    DATABASE_AUTO_CREATE is set; deployments run the Alembic migrations instead.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.database_auto_create:
        logger.info("DATABASE_AUTO_CREATE is set, creating missing tables")
        await create_all(engine)
