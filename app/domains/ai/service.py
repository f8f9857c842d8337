"""AI service layer: the message generation pipeline.

Flow for one generation: access gate, context assembly, provider
construction, then streaming persistence. Provider failures are classified
into user-facing errors and never retried here.
"""

import asyncio
import logging
from collections.abc import Sequence
from contextlib import aclosing
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.storage import BlobStore
from app.domains.ai.provider import ChatModel, ProviderFactory, create_provider
from app.domains.messages.service import MessageService
from app.domains.settings.service import SettingsService, resolve_model
from app.exceptions.ai import (
    AIConfigurationError,
    classify_provider_error,
    describe_provider_error,
    provider_error_to_exception,
)
from app.exceptions.base import BaseAppException
from app.schemas.ai import ContentPart, ImagePart, ProviderMessage, TextPart
from app.schemas.user import UserIdentity
from app.shared.access import require_conversation_access
from models import Conversation, MessageRole, StoredFile


logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class PersistedReply:
    """The assistant message written by a generation and its full text."""

    message_id: UUID
    content: str


async def _load_file_metadata(db: AsyncSession, handles: set[str]) -> dict[str, StoredFile]:
    file_ids = []
    for handle in handles:
        try:
            file_ids.append(UUID(handle))
        except ValueError:
            logger.warning(f"Ignoring malformed attachment handle {handle!r}")
    if not file_ids:
        return {}

    result = await db.execute(select(StoredFile).where(StoredFile.id.in_(file_ids)))
    return {str(stored.id): stored for stored in result.scalars().all()}


async def _resolve_attachment(
    blob_store: BlobStore, handle: str, metadata: StoredFile | None
) -> ContentPart | None:
    """Turn one attachment into a content part, or None to drop it."""
    try:
        if metadata is None:
            logger.error(f"No metadata for attachment {handle}, dropping it")
            return None

        if metadata.size > settings.max_attachment_size:
            logger.warning(f"File {handle} too large ({metadata.size} bytes), skipping")
            return None

        data = await blob_store.get(metadata.object_key)
        if data is None:
            logger.error(f"Blob for attachment {handle} is missing, dropping it")
            return None
        url = await blob_store.get_url(metadata.object_key)
        if url is None:
            logger.error(f"No URL for attachment {handle}, dropping it")
            return None

        content_type = metadata.content_type or DEFAULT_CONTENT_TYPE
        if content_type.startswith("image/"):
            return ImagePart(image=url, mime_type=content_type, data=data)
        return TextPart(text=f"[File attachment: {content_type}]")
    except Exception as e:
        logger.error(f"Failed to load file {handle}: {str(e)}")
        return None


async def build_messages_context(
    db: AsyncSession, blob_store: BlobStore, conversation: Conversation
) -> list[ProviderMessage]:
    """
    Build the provider message list for a conversation, oldest first.

    Attachments of a message are resolved concurrently and emitted in their
    stored order after the message text. Attachments that cannot be resolved
    or exceed the size ceiling are dropped.

    Args:
        db: Database session
        blob_store: Store holding attachment blobs
        conversation: A conversation the caller has already been authorized for

    Returns:
        list[ProviderMessage]: Messages ready for the provider
    """
    history = await MessageService(db).load_history(conversation.id)

    handles = {handle for message in history for handle in (message.attachments or [])}
    metadata = await _load_file_metadata(db, handles) if handles else {}

    provider_messages: list[ProviderMessage] = []
    for message in history:
        if not message.attachments:
            provider_messages.append(ProviderMessage(role=message.role, content=message.content))
            continue

        parts: list[ContentPart] = []
        if message.content and message.content.strip():
            parts.append(TextPart(text=message.content))

        # gather preserves input order regardless of completion order
        resolved = await asyncio.gather(
            *(_resolve_attachment(blob_store, handle, metadata.get(handle)) for handle in message.attachments)
        )
        parts.extend(part for part in resolved if part is not None)
        provider_messages.append(ProviderMessage(role=message.role, content=parts))

    return provider_messages


async def _chain(first: str, rest):
    yield first
    async for chunk in rest:
        yield chunk


async def stream_and_persist(
    db: AsyncSession,
    conversation: Conversation,
    model: ChatModel,
    messages: Sequence[ProviderMessage],
    temperature: float | None = None,
    batch_size: int | None = None,
) -> PersistedReply:
    """
    Stream a reply into a placeholder assistant message.

    The stream is opened and its first chunk read before the placeholder is
    inserted, so a rejection at stream open writes nothing. Readers therefore
    see the empty placeholder only once the provider has produced its first
    chunk, not at the moment generation starts. After that the
    accumulated text is written every ``batch_size`` chunks and once more at
    the end. Each write is the full text so far. A failure mid-stream
    propagates and leaves the last written prefix in place.

    Args:
        db: Database session
        conversation: Authorized target conversation
        model: Provider client
        messages: Context from :func:`build_messages_context`
        temperature: Sampling temperature, defaults to ``settings.ai_temperature``
        batch_size: Chunks per write, defaults to ``settings.ai_stream_flush_batch_size``

    Returns:
        PersistedReply: The placeholder message id and the complete text
    """
    temperature = settings.ai_temperature if temperature is None else temperature
    batch_size = batch_size or settings.ai_stream_flush_batch_size
    message_service = MessageService(db)

    async with aclosing(model.stream_text(messages, temperature)) as stream:
        try:
            first_chunk = await anext(stream)
        except StopAsyncIteration:
            first_chunk = None

        placeholder = await message_service.insert(conversation, MessageRole.ASSISTANT, "")
        logger.debug(f"Streaming {model.model_id} reply into message {placeholder.id}")

        full_text = ""
        pending = 0
        if first_chunk is not None:
            async for chunk in _chain(first_chunk, stream):
                full_text += chunk
                pending += 1
                if pending >= batch_size:
                    await message_service.set_content(placeholder, full_text, validate=False)
                    pending = 0

        if pending > 0:
            await message_service.set_content(placeholder, full_text, validate=False)

    logger.info(f"Generated {len(full_text)} characters into message {placeholder.id}")
    return PersistedReply(message_id=placeholder.id, content=full_text)


class AIService:
    """Service class for generating assistant replies."""

    def __init__(
        self,
        db: AsyncSession,
        blob_store: BlobStore,
        provider_factory: ProviderFactory = create_provider,
    ):
        """Initialize service with its collaborators."""
        self.db = db
        self.blob_store = blob_store
        self.provider_factory = provider_factory

    async def generate_response(
        self,
        conversation_id: UUID,
        identity: UserIdentity | None,
        model_override: str | None = None,
    ) -> tuple[str, PersistedReply]:
        """
        Generate and persist the assistant's reply to a conversation.

        Args:
            conversation_id: Target conversation
            identity: The caller
            model_override: Model id to use instead of the saved one

        Returns:
            tuple[str, PersistedReply]: The model id used and the persisted reply

        Raises:
            AuthenticationError, ConversationNotFoundError, ConversationPermissionError:
                From the access gate, before any other work
            AIConfigurationError: If the caller has not saved an API key
            InvalidModelError: If the model id is not supported
            AIServiceError: Classified provider failure
        """
        conversation = await require_conversation_access(self.db, identity, conversation_id)

        user_settings = await SettingsService(self.db).get_user_settings(identity)
        if user_settings is None or not user_settings.google_api_key:
            raise AIConfigurationError("Google AI API key is not configured. Add one in settings.")

        model_id = model_override if model_override is not None else resolve_model(user_settings.selected_model)

        messages = await build_messages_context(self.db, self.blob_store, conversation)
        model = self.provider_factory(user_settings.google_api_key, model_id)

        try:
            reply = await stream_and_persist(self.db, conversation, model, messages)
        except (BaseAppException, SQLAlchemyError):
            raise
        except Exception as e:
            info = describe_provider_error(e)
            kind = classify_provider_error(info)
            logger.error(
                f"AI provider error for conversation {conversation_id}: "
                f"kind={kind.value} status={info.status} code={info.code} message={info.message}"
            )
            raise provider_error_to_exception(kind, info.message) from e

        return model_id, reply
