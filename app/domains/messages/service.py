"""Message service layer."""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.exceptions.base import ValidationError, validate_string
from app.schemas.user import UserIdentity
from app.shared.access import require_conversation_access, require_message_access
from models import Conversation, Message, MessageRole, StoredFile, utcnow


logger = logging.getLogger(__name__)


class MessageService:
    """Service for reading and writing conversation messages.

    Every public method checks conversation ownership first.
    """

    def __init__(self, db: AsyncSession):
        """Initialize service with a database session."""
        self.db = db

    async def list_for_conversation(self, conversation_id: UUID, identity: UserIdentity | None) -> list[Message]:
        """Get a conversation's messages, oldest first."""
        await require_conversation_access(self.db, identity, conversation_id)
        return await self.load_history(conversation_id)

    async def load_history(self, conversation_id: UUID) -> list[Message]:
        result = await self.db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at, Message.id)
        )
        return list(result.scalars().all())

    async def get(self, message_id: UUID, identity: UserIdentity | None) -> Message:
        return await require_message_access(self.db, identity, message_id)

    async def create(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        identity: UserIdentity | None,
        attachments: Sequence[UUID] | None = None,
    ) -> Message:
        """Append a message and bump the conversation's last-accessed time.

        Raises:
            ValidationError: Content too long, or an attachment handle the caller did not upload
        """
        conversation = await require_conversation_access(self.db, identity, conversation_id)
        validate_string(content, "Message content", 0, settings.max_message_length)

        handles = [str(handle) for handle in attachments or []]
        if handles:
            await self._check_attachments(handles, conversation.user_id)

        return await self.insert(conversation, role, content, handles)

    async def insert(
        self,
        conversation: Conversation,
        role: MessageRole,
        content: str,
        attachments: list[str] | None = None,
    ) -> Message:
        """Insert a message into an already authorized conversation."""
        now = utcnow()
        message = Message(
            conversation_id=conversation.id,
            role=role,
            content=content,
            attachments=attachments or [],
            created_at=now,
            last_accessed_at=now,
        )
        try:
            self.db.add(message)
            conversation.last_accessed_at = now
            await self.db.commit()
            await self.db.refresh(message)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return message

    async def update(self, message_id: UUID, content: str, identity: UserIdentity | None) -> Message:
        message = await require_message_access(self.db, identity, message_id)
        return await self.set_content(message, content)

    async def set_content(self, message: Message, content: str, validate: bool = True) -> Message:
        """Replace a message's content and commit so readers see it immediately.

        Generated assistant text is written with ``validate=False``; the length
        cap applies to client-supplied content only.
        """
        if validate:
            validate_string(content, "Message content", 0, settings.max_message_length)
        try:
            message.content = content
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return message

    async def delete(self, message_id: UUID, identity: UserIdentity | None) -> None:
        message = await require_message_access(self.db, identity, message_id)
        try:
            await self.db.delete(message)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _check_attachments(self, handles: list[str], user_id: str) -> None:
        result = await self.db.execute(
            select(StoredFile.id).where(
                StoredFile.id.in_([UUID(h) for h in handles]),
                StoredFile.user_id == user_id,
                StoredFile.uploaded_at.is_not(None),
            )
        )
        known = {str(file_id) for file_id in result.scalars().all()}
        missing = [h for h in handles if h not in known]
        if missing:
            raise ValidationError("Unknown or incomplete attachments", details={"attachments": missing})
