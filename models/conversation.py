"""
Conversation model for chat threads owned by a single identity.
"""

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow


class Conversation(BaseModel):
    """
    Represents a chat conversation.

    :ivar user_id: Subject of the identity that owns the conversation. Never changes once set.
    :type user_id: str
    :ivar title: Free text title, 1-200 characters.
    :type title: str
    :ivar last_accessed_at: Bumped on every message append; drives retention.
    :type last_accessed_at: datetime
    """

    __tablename__ = "conversations"

    user_id = Column(String(255), nullable=False)
    title = Column(String(200), nullable=False)
    last_accessed_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.created_at",
    )

    __table_args__ = (
        Index("idx_conversations_user_created", "user_id", "created_at"),
        Index("idx_conversations_last_accessed", "last_accessed_at"),
    )
