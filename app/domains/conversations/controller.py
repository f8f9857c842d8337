"""Conversation API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_identity, get_db
from app.domains.conversations.service import ConversationService
from app.schemas.base import ResponseSchema
from app.schemas.chat import (
    ConversationCreate,
    ConversationListResponse,
    ConversationResponse,
    ConversationUpdate,
)
from app.schemas.user import UserIdentity


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("", response_model=ResponseSchema)
async def get_conversations(
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get all conversations for the current user, newest first."""
    service = ConversationService(db)
    conversations = await service.list_for_user(identity)

    result = ConversationListResponse(
        conversations=[ConversationResponse.model_validate(c) for c in conversations],
        total=len(conversations),
    )
    return ResponseSchema(
        status="success",
        message="Conversations retrieved successfully",
        data=result.model_dump(mode="json"),
    )


@router.post("", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_data: ConversationCreate | None = Body(None),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Start a new conversation."""
    service = ConversationService(db)
    conversation = await service.create(identity, conversation_data.title if conversation_data else None)

    return ResponseSchema(
        status="success",
        message="Conversation created successfully",
        data=ConversationResponse.model_validate(conversation).model_dump(mode="json"),
    )


@router.get("/{conversation_id}", response_model=ResponseSchema)
async def get_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    service = ConversationService(db)
    conversation = await service.get(conversation_id, identity)

    return ResponseSchema(
        status="success",
        message="Conversation retrieved successfully",
        data=ConversationResponse.model_validate(conversation).model_dump(mode="json"),
    )


@router.patch("/{conversation_id}", response_model=ResponseSchema)
async def update_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    update_data: ConversationUpdate = Body(...),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Rename a conversation."""
    service = ConversationService(db)
    conversation = await service.update_title(conversation_id, update_data.title, identity)

    return ResponseSchema(
        status="success",
        message="Conversation updated successfully",
        data=ConversationResponse.model_validate(conversation).model_dump(mode="json"),
    )


@router.post("/{conversation_id}/touch", response_model=ResponseSchema)
async def touch_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Mark a conversation as accessed so retention keeps it."""
    service = ConversationService(db)
    conversation = await service.touch(conversation_id, identity)

    return ResponseSchema(
        status="success",
        message="Conversation accessed",
        data={"id": str(conversation.id), "last_accessed_at": conversation.last_accessed_at.isoformat()},
    )


@router.delete("/{conversation_id}", response_model=ResponseSchema)
async def delete_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete a conversation and all of its messages."""
    service = ConversationService(db)
    await service.delete(conversation_id, identity)

    return ResponseSchema(status="success", message="Conversation deleted successfully", data=None)
