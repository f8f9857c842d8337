"""File attachment service layer."""

import logging
import uuid
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.storage import BlobStore
from app.exceptions.base import AppPermissionError, ValidationError
from app.exceptions.chat import FileOperationError, StoredFileNotFoundError
from app.schemas.user import UserIdentity
from app.shared.access import require_identity
from models import Conversation, Message, StoredFile, utcnow


logger = logging.getLogger(__name__)


class FileService:
    """Service for attachment uploads, metadata and access checks.

    A file is readable by a user only when a message in one of that user's
    conversations references it.
    """

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        """Initialize service with a database session and blob store."""
        self.db = db
        self.blob_store = blob_store

    async def generate_upload_url(self, identity: UserIdentity | None) -> tuple[StoredFile, str]:
        """Reserve a handle and return it with a presigned upload URL."""
        identity = require_identity(identity)
        handle = uuid.uuid4()
        stored = StoredFile(id=handle, user_id=identity.subject, object_key=f"attachments/{handle}")

        upload_url = await self.blob_store.generate_upload_url(stored.object_key)
        try:
            self.db.add(stored)
            await self.db.commit()
            await self.db.refresh(stored)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return stored, upload_url

    async def complete_upload(self, handle: UUID, identity: UserIdentity | None) -> StoredFile:
        """Record size, content type and digest once the client has uploaded the blob.

        Blobs over ``settings.max_attachment_size`` are deleted together with
        their handle and the call fails with ``ValidationError``.
        """
        identity = require_identity(identity)
        stored = await self.db.get(StoredFile, handle)
        if stored is None:
            raise StoredFileNotFoundError()
        if stored.user_id != identity.subject:
            raise AppPermissionError("Not authorized to access this file")

        stat = await self.blob_store.stat(stored.object_key)
        if stat is None:
            raise FileOperationError("Upload has not been received")
        try:
            self.validate_file_size(stat.size, settings.max_attachment_size)
        except ValidationError:
            logger.warning(f"Rejected upload {handle}: {stat.size} bytes")
            await self.delete_record(stored)
            raise

        digest = await self.blob_store.sha256(stored.object_key)
        if digest is None:
            raise FileOperationError("Upload has not been received")

        stored.size = stat.size
        stored.content_type = stat.content_type
        stored.sha256 = digest
        stored.uploaded_at = utcnow()
        await self.db.commit()
        await self.db.refresh(stored)
        logger.info(f"Recorded upload {handle} ({stored.size} bytes, {stored.content_type})")
        return stored

    async def get_metadata(self, handle: UUID | str) -> StoredFile | None:
        """Metadata lookup by handle, without an access check."""
        return await self.db.get(StoredFile, UUID(str(handle)))

    async def check_user_access(self, handle: UUID | str, identity: UserIdentity | None) -> bool:
        """Whether any message in the caller's conversations references ``handle``."""
        identity = require_identity(identity)
        handle = str(handle)

        conversations = await self.db.execute(
            select(Conversation.id).where(Conversation.user_id == identity.subject)
        )
        for conversation_id in conversations.scalars().all():
            messages = await self.db.execute(
                select(Message.attachments).where(Message.conversation_id == conversation_id)
            )
            for attachments in messages.scalars().all():
                if attachments and handle in attachments:
                    return True
        return False

    async def get_readable(self, handle: UUID, identity: UserIdentity | None) -> StoredFile:
        """Return metadata for a file the caller can read.

        Unreadable and unknown handles both report not found.
        """
        stored = await self.get_metadata(handle)
        if stored is None or not await self.check_user_access(handle, identity):
            raise StoredFileNotFoundError()
        return stored

    async def get_url(self, handle: UUID, identity: UserIdentity | None) -> str:
        stored = await self.get_readable(handle, identity)
        url = await self.blob_store.get_url(stored.object_key)
        if url is None:
            raise StoredFileNotFoundError()
        return url

    async def delete(self, handle: UUID, identity: UserIdentity | None) -> None:
        """Delete a file the caller uploaded."""
        identity = require_identity(identity)
        stored = await self.get_metadata(handle)
        if stored is None:
            raise StoredFileNotFoundError()
        if stored.user_id != identity.subject:
            raise AppPermissionError("Not authorized to delete this file")
        await self.delete_record(stored)

    async def delete_record(self, stored: StoredFile) -> None:
        """Remove the blob and its metadata row."""
        try:
            await self.blob_store.delete(stored.object_key)
        except Exception as e:
            logger.error(f"Failed to delete file {stored.id}: {str(e)}")
            raise FileOperationError("Failed to delete file") from e

        await self.db.delete(stored)
        await self.db.commit()

    async def get_orphaned(self) -> list[StoredFile]:
        """Uploaded files no message references."""
        referenced: set[str] = set()
        result = await self.db.execute(select(Message.attachments))
        for attachments in result.scalars().all():
            referenced.update(attachments or [])

        files = await self.db.execute(select(StoredFile).where(StoredFile.uploaded_at.is_not(None)))
        return [f for f in files.scalars().all() if str(f.id) not in referenced]

    @staticmethod
    def validate_file_size(size: int, max_size_bytes: int) -> None:
        if size > max_size_bytes:
            max_size_mb = max_size_bytes / (1024 * 1024)
            raise ValidationError(
                f"File too large. Maximum size is {max_size_mb:g}MB",
                details={"size": size, "max_size": max_size_bytes},
            )
