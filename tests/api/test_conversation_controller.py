"""
API tests for the conversation endpoints.
"""

import uuid

import pytest

from tests.factories import ConversationFactory, MessageFactory, persist


class TestConversationsAPI:
    """Test cases for /api/conversations."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, authenticated_client):
        created = await authenticated_client.post("/api/conversations", json={"title": "Recipes"})
        assert created.status_code == 201
        assert created.json()["data"]["title"] == "Recipes"

        response = await authenticated_client.get("/api/conversations")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["conversations"][0]["title"] == "Recipes"
        assert data["conversations"][0]["user_id"] == "user_alice"

    @pytest.mark.asyncio
    async def test_create_without_body(self, authenticated_client):
        response = await authenticated_client.post("/api/conversations")

        assert response.status_code == 201
        assert response.json()["data"]["title"].startswith("Chat ")

    @pytest.mark.asyncio
    async def test_list_excludes_other_users(self, test_db, authenticated_client, bob):
        await persist(test_db, ConversationFactory(user_id=bob.subject))

        response = await authenticated_client.get("/api/conversations")

        assert response.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client):
        response = await client.post("/api/conversations", json={"title": "x"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_get_foreign_conversation(self, test_db, authenticated_client, bob):
        foreign = await persist(test_db, ConversationFactory(user_id=bob.subject))

        response = await authenticated_client.get(f"/api/conversations/{foreign.id}")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_rename(self, authenticated_client, conversation):
        response = await authenticated_client.patch(
            f"/api/conversations/{conversation.id}", json={"title": "Renamed"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed"

    @pytest.mark.asyncio
    async def test_rename_too_long(self, authenticated_client, conversation):
        response = await authenticated_client.patch(
            f"/api/conversations/{conversation.id}", json={"title": "t" * 201}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_touch(self, authenticated_client, conversation):
        response = await authenticated_client.post(f"/api/conversations/{conversation.id}/touch")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(conversation.id)

    @pytest.mark.asyncio
    async def test_delete(self, test_db, authenticated_client, conversation):
        await persist(test_db, MessageFactory(conversation_id=conversation.id))

        response = await authenticated_client.delete(f"/api/conversations/{conversation.id}")
        assert response.status_code == 200

        missing = await authenticated_client.get(f"/api/conversations/{conversation.id}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown(self, authenticated_client):
        response = await authenticated_client.delete(f"/api/conversations/{uuid.uuid4()}")

        assert response.status_code == 404
