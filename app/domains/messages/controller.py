"""Message API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_identity, get_db
from app.domains.messages.service import MessageService
from app.schemas.base import ResponseSchema
from app.schemas.chat import MessageCreate, MessageListResponse, MessageResponse, MessageUpdate
from app.schemas.user import UserIdentity


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["messages"])


@router.get("/conversations/{conversation_id}/messages", response_model=ResponseSchema)
async def get_messages(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get a conversation's messages, oldest first.

    Assistant messages being generated appear here with their partial text.
    """
    service = MessageService(db)
    messages = await service.list_for_conversation(conversation_id, identity)

    result = MessageListResponse(
        conversation_id=conversation_id,
        messages=[MessageResponse.model_validate(m) for m in messages],
    )
    return ResponseSchema(
        status="success",
        message="Messages retrieved successfully",
        data=result.model_dump(mode="json"),
    )


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=ResponseSchema,
    status_code=status.HTTP_201_CREATED,
)
async def create_message(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    message_data: MessageCreate = Body(...),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Append a message to a conversation.

    Attachment handles must come from completed uploads by the caller.
    """
    service = MessageService(db)
    message = await service.create(
        conversation_id,
        message_data.role,
        message_data.content,
        identity,
        attachments=message_data.attachments,
    )

    return ResponseSchema(
        status="success",
        message="Message created successfully",
        data=MessageResponse.model_validate(message).model_dump(mode="json"),
    )


@router.get("/messages/{message_id}", response_model=ResponseSchema)
async def get_message(
    message_id: UUID = Path(..., description="Message ID"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    service = MessageService(db)
    message = await service.get(message_id, identity)

    return ResponseSchema(
        status="success",
        message="Message retrieved successfully",
        data=MessageResponse.model_validate(message).model_dump(mode="json"),
    )


@router.patch("/messages/{message_id}", response_model=ResponseSchema)
async def update_message(
    message_id: UUID = Path(..., description="Message ID"),
    update_data: MessageUpdate = Body(...),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    service = MessageService(db)
    message = await service.update(message_id, update_data.content, identity)

    return ResponseSchema(
        status="success",
        message="Message updated successfully",
        data=MessageResponse.model_validate(message).model_dump(mode="json"),
    )


@router.delete("/messages/{message_id}", response_model=ResponseSchema)
async def delete_message(
    message_id: UUID = Path(..., description="Message ID"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    service = MessageService(db)
    await service.delete(message_id, identity)

    return ResponseSchema(status="success", message="Message deleted successfully", data=None)
