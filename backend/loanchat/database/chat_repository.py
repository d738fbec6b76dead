# loanchat/database/chat_repository.py

"""
Chat Repository - the message store

Features:
- Append a chat turn (idempotent on the message id)
- Read a conversation back in created_at order, filtered by product and/or user
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from loanchat.errors import StorageError
from loanchat.model.chat import ChatMessage, utcnow
from loanchat.database.db.models import ChatMessageRow

logger = logging.getLogger(__name__)


class ChatRepository:
    """Chat message store"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # =====================================================
    # Write
    # =====================================================

    def add_message(self, message: ChatMessage) -> ChatMessage:
        """
        Persist a chat turn.

        created_at is assigned here, at persistence time. Writing an id that is
        already stored is a no-op and returns the stored row, so retried writes
        are safe.

        Args:
            message: the turn to store; its id is generated by the writer

        Returns:
            The stored message

        Raises:
            StorageError: the store rejected the write
        """
        try:
            with self.session_factory() as db:
                existing = db.get(ChatMessageRow, message.id)
                if existing:
                    return self._row_to_message(existing)

                row = ChatMessageRow(
                    id=message.id,
                    user_id=message.user_id,
                    product_id=message.product_id,
                    role=message.role,
                    content=message.content,
                    created_at=utcnow(),
                )
                db.add(row)
                db.commit()
                db.refresh(row)

                return self._row_to_message(row)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to store {message.role} message {message.id}: {e}")
            raise StorageError("Database error", details=str(e)) from e

    # =====================================================
    # Read
    # =====================================================

    def list_messages(
        self,
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[ChatMessage]:
        """Messages matching the given filters, oldest first."""
        stmt = select(ChatMessageRow).order_by(ChatMessageRow.created_at)
        if product_id:
            stmt = stmt.where(ChatMessageRow.product_id == product_id)
        if user_id:
            stmt = stmt.where(ChatMessageRow.user_id == user_id)

        try:
            with self.session_factory() as db:
                rows = db.execute(stmt).scalars().all()
                return [self._row_to_message(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load chat history: {e}")
            raise StorageError("Database error", details=str(e)) from e

    # =====================================================
    # Helper Methods
    # =====================================================

    def _row_to_message(self, row: ChatMessageRow) -> ChatMessage:
        return ChatMessage(
            id=row.id,
            user_id=row.user_id,
            product_id=row.product_id,
            role=row.role,
            content=row.content,
            created_at=row.created_at,
        )
