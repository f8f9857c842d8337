"""
Unit tests for the Gemini provider adapter.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.domains.ai.provider import (
    GeminiChatModel,
    create_provider,
    to_gemini_contents,
    validate_model,
)
from app.exceptions.ai import InvalidModelError
from app.schemas.ai import ImagePart, ProviderMessage, TextPart
from models import MessageRole


class TestCreateProvider:
    """Test cases for model validation and client construction."""

    @pytest.mark.parametrize(
        "model_id",
        ["gemini-2.5-flash", "gemini-2.5-pro", "gemini-1.5-flash", "gemini-1.5-pro"],
    )
    def test_supported_models(self, model_id):
        model = create_provider("AIza-key", model_id)

        assert isinstance(model, GeminiChatModel)
        assert model.model_id == model_id
        assert model.api_key == "AIza-key"

    @pytest.mark.parametrize(
        "model_id",
        ["gpt-4", "", "gemini-2.5-flash ", " gemini-2.5-pro", "GEMINI-2.5-FLASH", "gemini-2.0-flash"],
    )
    def test_unsupported_models_rejected(self, model_id):
        with pytest.raises(InvalidModelError) as exc_info:
            create_provider("AIza-key", model_id)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "AI_INVALID_MODEL"

    def test_validate_model_names_supported_models(self):
        with pytest.raises(InvalidModelError) as exc_info:
            validate_model("gpt-4")

        assert "gemini-2.5-flash" in exc_info.value.message
        assert exc_info.value.details == {"model": "gpt-4"}

    def test_construction_makes_no_network_call(self):
        with patch("app.domains.ai.provider.GenerativeServiceAsyncClient") as client_cls:
            create_provider("AIza-key", "gemini-2.5-flash")

        client_cls.assert_not_called()


class TestToGeminiContents:
    """Test cases for message conversion."""

    def test_roles_and_text(self):
        contents = to_gemini_contents(
            [
                ProviderMessage(role=MessageRole.USER, content="Hello"),
                ProviderMessage(role=MessageRole.ASSISTANT, content="Hi!"),
            ]
        )

        assert [c.role for c in contents] == ["user", "model"]
        assert contents[0].parts[0].text == "Hello"
        assert contents[1].parts[0].text == "Hi!"

    def test_empty_messages_are_skipped(self):
        contents = to_gemini_contents(
            [
                ProviderMessage(role=MessageRole.USER, content="Hello"),
                ProviderMessage(role=MessageRole.ASSISTANT, content=""),
                ProviderMessage(role=MessageRole.USER, content=[]),
            ]
        )

        assert len(contents) == 1

    def test_parts_keep_order(self):
        message = ProviderMessage(
            role=MessageRole.USER,
            content=[
                TextPart(text="What is in these?"),
                ImagePart(image="https://blobs.test/a", mime_type="image/png", data=b"\x89PNG"),
                TextPart(text="[File attachment: application/pdf]"),
                ImagePart(image="https://blobs.test/b", mime_type="image/jpeg"),
            ],
        )

        parts = to_gemini_contents([message])[0].parts

        assert parts[0].text == "What is in these?"
        assert parts[1].inline_data.mime_type == "image/png"
        assert parts[1].inline_data.data == b"\x89PNG"
        assert parts[2].text == "[File attachment: application/pdf]"
        assert parts[3].file_data.file_uri == "https://blobs.test/b"


class TestGeminiChatModel:
    """Test cases for streaming through the generative language client."""

    @pytest.mark.asyncio
    async def test_stream_text_yields_chunk_text(self):
        def response(*texts):
            part_list = [MagicMock(text=t) for t in texts]
            candidate = MagicMock()
            candidate.content.parts = part_list
            return MagicMock(candidates=[candidate])

        async def fake_stream():
            yield response("Hi")
            yield response(" there", "")
            yield response("!")

        client = MagicMock()
        client.stream_generate_content = AsyncMock(return_value=fake_stream())

        with patch("app.domains.ai.provider.GenerativeServiceAsyncClient", return_value=client) as client_cls:
            model = GeminiChatModel(api_key="AIza-key", model_id="gemini-2.5-pro")
            chunks = [
                chunk
                async for chunk in model.stream_text(
                    [ProviderMessage(role=MessageRole.USER, content="Hello")], temperature=0.7
                )
            ]

        assert chunks == ["Hi", " there", "!"]
        client_options = client_cls.call_args.kwargs["client_options"]
        assert client_options.api_key == "AIza-key"

        request = client.stream_generate_content.call_args.kwargs["request"]
        assert request.model == "models/gemini-2.5-pro"
        assert request.generation_config.temperature == pytest.approx(0.7)
        assert request.contents[0].parts[0].text == "Hello"

    @pytest.mark.asyncio
    async def test_each_model_gets_its_own_client(self):
        with patch("app.domains.ai.provider.GenerativeServiceAsyncClient") as client_cls:
            first = GeminiChatModel(api_key="key-one", model_id="gemini-2.5-flash")
            second = GeminiChatModel(api_key="key-two", model_id="gemini-2.5-flash")
            first._get_client()
            second._get_client()
            first._get_client()

        keys = [call.kwargs["client_options"].api_key for call in client_cls.call_args_list]
        assert keys == ["key-one", "key-two"]
