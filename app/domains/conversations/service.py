"""Conversation service layer."""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.exceptions.base import validate_string
from app.schemas.user import UserIdentity
from app.shared.access import require_conversation_access, require_identity
from models import Conversation, Message, utcnow


logger = logging.getLogger(__name__)


class ConversationService:
    """Service for creating, listing and removing conversations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with a database session."""
        self.db = db

    async def list_for_user(self, identity: UserIdentity | None) -> list[Conversation]:
        """Get the caller's conversations, newest first."""
        identity = require_identity(identity)
        result = await self.db.execute(
            select(Conversation)
            .where(Conversation.user_id == identity.subject)
            .order_by(Conversation.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, conversation_id: UUID, identity: UserIdentity | None) -> Conversation:
        return await require_conversation_access(self.db, identity, conversation_id)

    async def create(self, identity: UserIdentity | None, title: str | None = None) -> Conversation:
        """Create a conversation owned by the caller.

        A blank title becomes ``Chat <date>``.

        Raises:
            ValidationError: If the title is longer than allowed
        """
        identity = require_identity(identity)
        now = utcnow()
        conversation_title = (title or "").strip() or f"Chat {now.date().isoformat()}"
        validate_string(conversation_title, "Title", 1, settings.max_title_length)

        conversation = Conversation(
            user_id=identity.subject,
            title=conversation_title,
            last_accessed_at=now,
        )
        try:
            self.db.add(conversation)
            await self.db.commit()
            await self.db.refresh(conversation)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(f"Created conversation {conversation.id} for user {identity.subject}")
        return conversation

    async def update_title(self, conversation_id: UUID, title: str, identity: UserIdentity | None) -> Conversation:
        conversation = await require_conversation_access(self.db, identity, conversation_id)
        conversation.title = validate_string(title, "Title", 1, settings.max_title_length)
        await self.db.commit()
        await self.db.refresh(conversation)
        return conversation

    async def touch(self, conversation_id: UUID, identity: UserIdentity | None) -> Conversation:
        """Bump the conversation's last-accessed timestamp."""
        conversation = await require_conversation_access(self.db, identity, conversation_id)
        conversation.last_accessed_at = utcnow()
        await self.db.commit()
        return conversation

    async def delete(self, conversation_id: UUID, identity: UserIdentity | None) -> None:
        """Delete a conversation and all of its messages."""
        conversation = await require_conversation_access(self.db, identity, conversation_id)
        await self.delete_record(conversation)
        logger.info(f"Deleted conversation {conversation_id}")

    async def delete_record(self, conversation: Conversation) -> None:
        """Delete a conversation row and its messages without an ownership check."""
        try:
            await self.db.execute(delete(Message).where(Message.conversation_id == conversation.id))
            await self.db.delete(conversation)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def get_idle(self, days_old: int) -> list[Conversation]:
        """Conversations not accessed in ``days_old`` days, across all users."""
        cutoff = utcnow() - timedelta(days=days_old)
        result = await self.db.execute(select(Conversation).where(Conversation.last_accessed_at < cutoff))
        return list(result.scalars().all())
