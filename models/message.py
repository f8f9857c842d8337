"""
Message model for user and assistant turns.
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel, utcnow


class MessageRole(str, enum.Enum):
    """Message role enumeration."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """
    Represents a single chat message.

    Assistant messages start as an empty placeholder and are patched while the
    provider stream is consumed.
    """

    __tablename__ = "messages"

    conversation_id = Column(
        UUID(), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(Enum(MessageRole, values_callable=lambda e: [m.value for m in e]), nullable=False)
    content = Column(Text, nullable=False, default="")

    # Ordered list of attachment handles (stored file ids as strings)
    attachments = Column(JSON, nullable=False, default=list)

    last_accessed_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (Index("idx_messages_conversation_created", "conversation_id", "created_at"),)
