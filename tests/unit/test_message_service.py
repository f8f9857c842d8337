"""
Unit tests for MessageService.
"""

import uuid
from datetime import timedelta

import pytest

from app.domains.messages.service import MessageService
from app.exceptions.base import ValidationError
from app.exceptions.chat import ConversationPermissionError, MessageNotFoundError
from models import MessageRole, utcnow
from tests.factories import ConversationFactory, MessageFactory, StoredFileFactory, persist


class TestMessageService:
    """Test cases for MessageService."""

    @pytest.mark.asyncio
    async def test_create_bumps_conversation(self, test_db, alice):
        conversation = await persist(
            test_db,
            ConversationFactory(user_id=alice.subject, last_accessed_at=utcnow() - timedelta(days=5)),
        )

        message = await MessageService(test_db).create(conversation.id, MessageRole.USER, "Hello", alice)

        assert message.content == "Hello"
        assert message.attachments == []
        await test_db.refresh(conversation)
        assert conversation.last_accessed_at >= message.created_at - timedelta(seconds=1)

    @pytest.mark.asyncio
    async def test_create_in_foreign_conversation(self, test_db, conversation, bob):
        with pytest.raises(ConversationPermissionError):
            await MessageService(test_db).create(conversation.id, MessageRole.USER, "Hi", bob)

    @pytest.mark.asyncio
    async def test_content_length_cap(self, test_db, conversation, alice):
        service = MessageService(test_db)

        at_cap = await service.create(conversation.id, MessageRole.USER, "x" * 10000, alice)
        assert len(at_cap.content) == 10000

        with pytest.raises(ValidationError):
            await service.create(conversation.id, MessageRole.USER, "x" * 10001, alice)

    @pytest.mark.asyncio
    async def test_empty_content_allowed(self, test_db, conversation, alice):
        message = await MessageService(test_db).create(conversation.id, MessageRole.USER, "", alice)

        assert message.content == ""

    @pytest.mark.asyncio
    async def test_create_with_own_uploaded_attachments(self, test_db, conversation, alice):
        first, second = StoredFileFactory(user_id=alice.subject), StoredFileFactory(user_id=alice.subject)
        await persist(test_db, first, second)

        message = await MessageService(test_db).create(
            conversation.id, MessageRole.USER, "see files", alice, attachments=[second.id, first.id]
        )

        assert message.attachments == [str(second.id), str(first.id)]

    @pytest.mark.asyncio
    async def test_rejects_foreign_or_incomplete_attachments(self, test_db, conversation, alice, bob):
        foreign = StoredFileFactory(user_id=bob.subject)
        pending = StoredFileFactory(user_id=alice.subject, uploaded_at=None)
        await persist(test_db, foreign, pending)
        unknown = uuid.uuid4()

        with pytest.raises(ValidationError) as exc_info:
            await MessageService(test_db).create(
                conversation.id, MessageRole.USER, "hi", alice, attachments=[foreign.id, pending.id, unknown]
            )

        assert exc_info.value.details["attachments"] == [str(foreign.id), str(pending.id), str(unknown)]

    @pytest.mark.asyncio
    async def test_list_oldest_first(self, test_db, conversation, alice):
        now = utcnow()
        later = MessageFactory(conversation_id=conversation.id, content="later", created_at=now)
        earlier = MessageFactory(
            conversation_id=conversation.id, content="earlier", created_at=now - timedelta(minutes=1)
        )
        await persist(test_db, later, earlier)

        messages = await MessageService(test_db).list_for_conversation(conversation.id, alice)

        assert [m.content for m in messages] == ["earlier", "later"]

    @pytest.mark.asyncio
    async def test_equal_timestamps_order_by_id(self, test_db, conversation, alice):
        now = utcnow()
        high = uuid.UUID("ffffffff-0000-4000-8000-000000000000")
        low = uuid.UUID("00000000-0000-4000-8000-000000000000")
        await persist(
            test_db,
            MessageFactory(id=high, conversation_id=conversation.id, content="second", created_at=now),
            MessageFactory(id=low, conversation_id=conversation.id, content="first", created_at=now),
        )

        messages = await MessageService(test_db).load_history(conversation.id)

        assert [m.id for m in messages] == [low, high]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, test_db, conversation, alice):
        message = await persist(test_db, MessageFactory(conversation_id=conversation.id, content="draft"))
        service = MessageService(test_db)

        updated = await service.update(message.id, "final", alice)
        assert updated.content == "final"

        await service.delete(message.id, alice)
        with pytest.raises(MessageNotFoundError):
            await service.get(message.id, alice)

    @pytest.mark.asyncio
    async def test_update_enforces_cap(self, test_db, conversation, alice):
        message = await persist(test_db, MessageFactory(conversation_id=conversation.id))

        with pytest.raises(ValidationError):
            await MessageService(test_db).update(message.id, "y" * 10001, alice)

    @pytest.mark.asyncio
    async def test_set_content_without_validation(self, test_db, conversation):
        message = await persist(test_db, MessageFactory(conversation_id=conversation.id))

        updated = await MessageService(test_db).set_content(message, "z" * 20000, validate=False)

        assert len(updated.content) == 20000
