"""
Unit tests for the retention jobs.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.services.cleanup_service import CleanupService
from models import Conversation, Message, StoredFile, utcnow
from tests.factories import ConversationFactory, MessageFactory, StoredFileFactory, persist


async def count(test_db, model) -> int:
    return await test_db.scalar(select(func.count()).select_from(model))


class TestCleanupOldConversations:
    """Test cases for CleanupService.cleanup_old_conversations."""

    @pytest.mark.asyncio
    async def test_removes_idle_conversations_with_messages_and_files(self, test_db, blob_store, alice):
        idle = ConversationFactory(user_id=alice.subject, last_accessed_at=utcnow() - timedelta(days=45))
        active = ConversationFactory(user_id=alice.subject)
        stored = StoredFileFactory(user_id=alice.subject)
        await persist(test_db, idle, active, stored)
        blob_store.put(stored.object_key, b"img", "image/png")
        await persist(
            test_db,
            MessageFactory(conversation_id=idle.id, attachments=[str(stored.id)]),
            MessageFactory(conversation_id=active.id),
        )

        stats = await CleanupService(test_db, blob_store).cleanup_old_conversations(days_old=30)

        assert stats == {"conversations_deleted": 1, "files_deleted": 1, "files_failed": 0}
        assert [c.id for c in (await test_db.execute(select(Conversation))).scalars()] == [active.id]
        assert await count(test_db, Message) == 1
        assert await count(test_db, StoredFile) == 0
        assert blob_store.deleted == [stored.object_key]

    @pytest.mark.asyncio
    async def test_uses_configured_retention(self, test_db, blob_store, alice):
        await persist(
            test_db,
            ConversationFactory(user_id=alice.subject, last_accessed_at=utcnow() - timedelta(days=31)),
            ConversationFactory(user_id=alice.subject, last_accessed_at=utcnow() - timedelta(days=29)),
        )

        stats = await CleanupService(test_db, blob_store).cleanup_old_conversations()

        assert stats["conversations_deleted"] == 1
        assert await count(test_db, Conversation) == 1

    @pytest.mark.asyncio
    async def test_blob_failure_keeps_file_row(self, test_db, blob_store, alice):
        idle = ConversationFactory(user_id=alice.subject, last_accessed_at=utcnow() - timedelta(days=45))
        stored = StoredFileFactory(user_id=alice.subject)
        await persist(test_db, idle, stored)
        blob_store.failing.add(stored.object_key)
        await persist(
            test_db,
            MessageFactory(conversation_id=idle.id, attachments=[str(stored.id), "not-a-handle"]),
        )

        stats = await CleanupService(test_db, blob_store).cleanup_old_conversations(days_old=30)

        assert stats == {"conversations_deleted": 1, "files_deleted": 0, "files_failed": 2}
        assert await count(test_db, StoredFile) == 1


class TestCleanupOrphanedFiles:
    @pytest.mark.asyncio
    async def test_removes_unreferenced_uploads(self, test_db, blob_store, conversation, alice):
        referenced = StoredFileFactory(user_id=alice.subject)
        orphan = StoredFileFactory(user_id=alice.subject)
        await persist(test_db, referenced, orphan)
        await persist(test_db, MessageFactory(conversation_id=conversation.id, attachments=[str(referenced.id)]))

        stats = await CleanupService(test_db, blob_store).cleanup_orphaned_files()

        assert stats == {"files_deleted": 1, "files_failed": 0}
        remaining = (await test_db.execute(select(StoredFile.id))).scalars().all()
        assert remaining == [referenced.id]

    @pytest.mark.asyncio
    async def test_counts_failures(self, test_db, blob_store, alice):
        orphan = await persist(test_db, StoredFileFactory(user_id=alice.subject))
        blob_store.failing.add(orphan.object_key)

        stats = await CleanupService(test_db, blob_store).cleanup_orphaned_files()

        assert stats == {"files_deleted": 0, "files_failed": 1}
