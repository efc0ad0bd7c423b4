"""
Chat session repositories.

This module provides data access operations for chat sessions and their
message history.
"""

from __future__ import annotations

import json
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.chat_sessions import ChatMessage, ChatSession
from .base import SQLModelRepository


class ChatSessionRepository(SQLModelRepository[ChatSession]):
    """Repository for chat sessions."""

    default_order = "created_at"
    default_order_desc = True

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ChatSession)


class ChatMessageRepository(SQLModelRepository[ChatMessage]):
    """Repository for chat messages."""

    default_order = "created_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ChatMessage)

    async def add_message(
        self,
        session_id: int,
        sender_type: str,
        content: str,
        sender_id: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> ChatMessage:
        """Append a message to a session.

        Args:
            session_id: Chat session ID
            sender_type: user, ai, agent or system
            content: Message text
            sender_id: Identity of the sender, when known
            metadata: Extra provenance stored as JSON

        Returns:
            The persisted ChatMessage
        """
        message = ChatMessage(
            session_id=session_id,
            sender_type=sender_type,
            sender_id=sender_id,
            content=content,
            message_metadata=json.dumps(metadata or {}),
        )
        return await self.create(message)

    async def list_for_session(self, session_id: int, limit: Optional[int] = None) -> List[ChatMessage]:
        """Messages of a session, oldest first."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def recent_for_session(self, session_id: int, limit: int = 10) -> List[ChatMessage]:
        """The last ``limit`` messages of a session, returned oldest first."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(reversed(result.scalars().all()))
