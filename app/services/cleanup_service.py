"""Retention service for idle conversations and orphaned attachments."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.storage import BlobStore
from app.domains.conversations.service import ConversationService
from app.domains.files.service import FileService
from app.domains.messages.service import MessageService
from app.exceptions.chat import FileOperationError


logger = logging.getLogger(__name__)


class CleanupService:
    """Service for the scheduled retention jobs."""

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        """Initialize cleanup service.

        Args:
            db: Async database session
            blob_store: Store holding attachment blobs
        """
        self.db = db
        self.blob_store = blob_store
        self.conversations = ConversationService(db)
        self.messages = MessageService(db)
        self.files = FileService(db, blob_store)

    async def cleanup_old_conversations(self, days_old: int | None = None) -> dict[str, Any]:
        """Delete conversations nobody accessed in ``days_old`` days.

        Attached files go with them. A file whose blob cannot be deleted is
        logged and left for the orphaned file sweep.

        Returns:
            Dictionary with summary of what was deleted
        """
        days_old = days_old or settings.retention_days
        logger.info(f"Starting cleanup of conversations idle for {days_old} days")

        stats = {"conversations_deleted": 0, "files_deleted": 0, "files_failed": 0}

        for conversation in await self.conversations.get_idle(days_old):
            for message in await self.messages.load_history(conversation.id):
                for handle in message.attachments or []:
                    if await self._delete_file(handle):
                        stats["files_deleted"] += 1
                    else:
                        stats["files_failed"] += 1

            await self.conversations.delete_record(conversation)
            stats["conversations_deleted"] += 1

        logger.info(f"Cleaned up {stats['conversations_deleted']} old conversations: {stats}")
        return stats

    async def cleanup_orphaned_files(self) -> dict[str, Any]:
        """Delete uploaded files that no message references.

        Returns:
            Dictionary with summary of what was deleted
        """
        stats = {"files_deleted": 0, "files_failed": 0}

        for stored in await self.files.get_orphaned():
            try:
                await self.files.delete_record(stored)
                stats["files_deleted"] += 1
            except FileOperationError:
                stats["files_failed"] += 1

        logger.info(f"Cleaned up {stats['files_deleted']} orphaned files")
        return stats

    async def _delete_file(self, handle: str) -> bool:
        try:
            stored = await self.files.get_metadata(handle)
        except ValueError:
            logger.warning(f"Ignoring malformed attachment handle {handle!r}")
            return False
        if stored is None:
            return False

        try:
            await self.files.delete_record(stored)
        except FileOperationError:
            return False
        return True
