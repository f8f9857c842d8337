"""Ownership checks shared by the conversation, message, file and AI domains."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import AuthenticationError
from app.exceptions.chat import (
    ConversationNotFoundError,
    ConversationPermissionError,
    MessageNotFoundError,
)
from app.schemas.user import UserIdentity
from models import Conversation, Message


logger = logging.getLogger(__name__)


def require_identity(identity: UserIdentity | None) -> UserIdentity:
    """Fail with ``AuthenticationError`` when no caller identity is present."""
    if identity is None or not identity.subject:
        raise AuthenticationError("Authentication required")
    return identity


async def require_conversation_access(
    db: AsyncSession, identity: UserIdentity | None, conversation_id: UUID
) -> Conversation:
    """Return the conversation if the caller owns it.

    This is the authorization boundary for every conversation-scoped
    operation and runs before any other work.

    Raises:
        AuthenticationError: No identity
        ConversationNotFoundError: The conversation does not exist
        ConversationPermissionError: The conversation belongs to someone else
    """
    identity = require_identity(identity)

    conversation = await db.get(Conversation, conversation_id)
    if conversation is None:
        raise ConversationNotFoundError()

    if conversation.user_id != identity.subject:
        logger.warning(f"User {identity.subject} denied access to conversation {conversation_id}")
        raise ConversationPermissionError()

    return conversation


async def require_message_access(db: AsyncSession, identity: UserIdentity | None, message_id: UUID) -> Message:
    """Return the message if the caller owns its conversation."""
    identity = require_identity(identity)

    message = await db.get(Message, message_id)
    if message is None:
        raise MessageNotFoundError()

    await require_conversation_access(db, identity, message.conversation_id)
    return message
