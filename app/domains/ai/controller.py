"""AI API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import enforce_rate_limit, get_blob_store, get_db, get_provider_factory
from app.core.storage import BlobStore
from app.domains.ai.provider import ProviderFactory
from app.domains.ai.service import AIService
from app.schemas.ai import GenerateRequest, GenerateResponse
from app.schemas.base import ResponseSchema
from app.schemas.user import UserIdentity


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["ai"])


@router.post("/{conversation_id}/generate", response_model=ResponseSchema, status_code=201)
async def generate_response(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    generate_request: GenerateRequest | None = Body(None),
    identity: UserIdentity = Depends(enforce_rate_limit),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
):
    """Generate the assistant's reply to a conversation.

    The reply is streamed into a new assistant message that readers can poll
    while generation is running. Provider failures are returned as classified
    errors; any text already written stays on the message.
    """
    service = AIService(db, blob_store, provider_factory)
    model_id, reply = await service.generate_response(
        conversation_id, identity, model_override=generate_request.model if generate_request else None
    )

    result = GenerateResponse(
        conversation_id=conversation_id,
        message_id=reply.message_id,
        model=model_id,
        content=reply.content,
    )
    return ResponseSchema(
        status="success",
        message="Response generated successfully",
        data=result.model_dump(mode="json"),
    )
