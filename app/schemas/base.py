"""Shared schema bases and the response envelope."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema; reads attributes so ORM rows validate directly."""
    model_config = ConfigDict(from_attributes=True)


class BaseModelSchema(BaseSchema):
    """Fields every persisted chat record carries."""
    id: UUID
    created_at: datetime
    updated_at: datetime


class ResponseSchema(BaseSchema):
    """Envelope returned by the conversation, message, file and generate endpoints."""
    status: str
    message: str | None = None
    data: dict[str, Any] | None = None
