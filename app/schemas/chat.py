"""Chat schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from models.message import MessageRole

from .base import BaseModelSchema, BaseSchema


class ConversationCreate(BaseSchema):
    """Schema for creating a new conversation."""

    title: str | None = Field(None, description="Optional title; a dated default is used when blank")


class ConversationUpdate(BaseSchema):
    """Schema for renaming a conversation."""

    title: str = Field(..., description="New conversation title")


class ConversationResponse(BaseModelSchema):
    """Schema for conversation response."""

    user_id: str
    title: str
    last_accessed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationListResponse(BaseSchema):
    """Schema for the caller's conversations, newest first."""

    conversations: list[ConversationResponse]
    total: int


class MessageCreate(BaseSchema):
    """Schema for appending a message to a conversation."""

    role: MessageRole = Field(default=MessageRole.USER, description="Message role")
    content: str = Field(..., description="Message content")
    attachments: list[UUID] = Field(default_factory=list, description="Attachment handles, in order")

    @field_validator("attachments")
    @classmethod
    def validate_unique_attachments(cls, v: list[UUID]) -> list[UUID]:
        """Reject the same handle attached twice."""
        if len(set(v)) != len(v):
            raise ValueError("Attachments must not contain duplicates")
        return v


class MessageUpdate(BaseSchema):
    """Schema for replacing message content."""

    content: str = Field(..., description="New message content")


class MessageResponse(BaseModelSchema):
    """Schema for chat message response."""

    conversation_id: UUID
    role: MessageRole
    content: str
    attachments: list[UUID] = Field(default_factory=list)
    last_accessed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageListResponse(BaseSchema):
    """Schema for a conversation's messages, oldest first."""

    conversation_id: UUID
    messages: list[MessageResponse]
