"""Gemini provider adapter.

Builds a chat model client bound to one API key and one model. Each client
carries its own credentials, so concurrent requests with different user keys
never share global SDK configuration.
"""

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Protocol

import google.generativeai as genai
from google.ai.generativelanguage_v1beta import GenerativeServiceAsyncClient
from google.api_core.client_options import ClientOptions

from app.core.config import SUPPORTED_MODELS, settings
from app.exceptions.ai import InvalidModelError
from app.schemas.ai import ImagePart, ProviderMessage, TextPart
from models.message import MessageRole


logger = logging.getLogger(__name__)


class ChatModel(Protocol):
    model_id: str

    def stream_text(self, messages: Sequence[ProviderMessage], temperature: float) -> AsyncIterator[str]: ...


ProviderFactory = Callable[[str, str], ChatModel]


def validate_model(model_id: str) -> None:
    """Reject any model id that is not exactly one of the supported ids."""
    if model_id not in SUPPORTED_MODELS:
        raise InvalidModelError(
            f"Invalid model: {model_id}. Supported models: {', '.join(SUPPORTED_MODELS)}",
            details={"model": model_id},
        )


def to_gemini_contents(messages: Sequence[ProviderMessage]) -> list:
    """Convert provider messages to Gemini ``Content`` protos.

    Messages without any usable part (an empty placeholder left by a failed
    generation) are skipped since Gemini rejects empty contents.
    """
    contents = []
    for message in messages:
        role = "model" if message.role == MessageRole.ASSISTANT else "user"
        parts = []
        if isinstance(message.content, str):
            if message.content:
                parts.append(genai.protos.Part(text=message.content))
        else:
            for part in message.content:
                if isinstance(part, TextPart):
                    parts.append(genai.protos.Part(text=part.text))
                elif isinstance(part, ImagePart):
                    if part.data is not None:
                        blob = genai.protos.Blob(mime_type=part.mime_type, data=part.data)
                        parts.append(genai.protos.Part(inline_data=blob))
                    else:
                        file_data = genai.protos.FileData(mime_type=part.mime_type, file_uri=part.image)
                        parts.append(genai.protos.Part(file_data=file_data))
        if parts:
            contents.append(genai.protos.Content(role=role, parts=parts))
    return contents


class GeminiChatModel:
    """Streaming Gemini client bound to one API key and model."""

    def __init__(self, api_key: str, model_id: str):
        self.api_key = api_key
        self.model_id = model_id
        self._client: GenerativeServiceAsyncClient | None = None

    def _get_client(self) -> GenerativeServiceAsyncClient:
        # Created on first use so constructing the model never touches the network
        if self._client is None:
            self._client = GenerativeServiceAsyncClient(client_options=ClientOptions(api_key=self.api_key))
        return self._client

    async def stream_text(self, messages: Sequence[ProviderMessage], temperature: float) -> AsyncIterator[str]:
        """Yield text chunks as the model produces them."""
        request = genai.protos.GenerateContentRequest(
            model=f"models/{self.model_id}",
            contents=to_gemini_contents(messages),
            generation_config=genai.protos.GenerationConfig(candidate_count=1, temperature=temperature),
        )
        stream = await self._get_client().stream_generate_content(
            request=request, timeout=settings.ai_request_timeout
        )
        async for response in stream:
            for candidate in response.candidates[:1]:
                for part in candidate.content.parts:
                    if part.text:
                        yield part.text


def create_provider(api_key: str, model_id: str) -> ChatModel:
    """Return a chat model for ``model_id`` after a local allow-list check."""
    validate_model(model_id)
    logger.debug(f"Creating Gemini client for model {model_id}")
    return GeminiChatModel(api_key=api_key, model_id=model_id)
