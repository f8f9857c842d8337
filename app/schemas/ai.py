"""AI schemas for provider messages and generation requests."""

from __future__ import annotations

from typing import Annotated, Literal
from uuid import UUID

from pydantic import Field

from models.message import MessageRole

from .base import BaseSchema


class TextPart(BaseSchema):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseSchema):
    """Image content part referencing a fetchable URL.

    ``data`` carries the bytes already fetched from the blob store so the
    provider client can send them inline.
    """

    type: Literal["image"] = "image"
    image: str = Field(..., description="Fetchable URL of the image")
    mime_type: str = Field(..., description="Image content type")
    data: bytes | None = Field(None, exclude=True, repr=False)


ContentPart = Annotated[TextPart | ImagePart, Field(discriminator="type")]


class ProviderMessage(BaseSchema):
    """Provider-agnostic chat message."""

    role: MessageRole
    content: str | list[ContentPart]


class GenerateRequest(BaseSchema):
    """Schema for requesting an assistant reply."""

    model: str | None = Field(None, description="Overrides the saved model for this request")


class GenerateResponse(BaseSchema):
    """Schema for a completed assistant reply."""

    conversation_id: UUID
    message_id: UUID
    model: str
    content: str
