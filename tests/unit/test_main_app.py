"""
Unit tests for application-level routes and error rendering.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from app.main import app, lifespan


class TestAppRoutes:
    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Gemini Chat API"

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["database"] == "healthy"
        assert data["environment"] == "testing"

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        response = await client.get("/")

        uuid.UUID(response.headers["X-Request-ID"])


class TestErrorEnvelope:
    @pytest.mark.asyncio
    async def test_app_exception_envelope(self, authenticated_client):
        response = await authenticated_client.get(f"/api/conversations/{uuid.uuid4()}")

        assert response.status_code == 404
        body = response.json()
        assert body["status"] == "error"
        assert body["message"] == "Conversation not found"
        assert body["error_code"] == "CONVERSATION_NOT_FOUND"
        assert body["request_id"] == response.headers["X-Request-ID"]
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_unauthenticated_envelope(self, client):
        response = await client.get("/api/conversations")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_request_validation_envelope(self, authenticated_client):
        response = await authenticated_client.get("/api/conversations/not-a-uuid")

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["loc"] == ["path", "conversation_id"]

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "HTTP_ERROR"


class TestLifespan:
    @pytest.mark.asyncio
    async def test_startup_prepares_blob_store(self):
        with patch("app.main.init_blob_store", new_callable=AsyncMock) as init_store:
            async with lifespan(app):
                init_store.assert_awaited_once()
