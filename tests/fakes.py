"""In-memory stand-ins for the blob store and the Gemini client."""

import asyncio
import hashlib
from collections.abc import Sequence

from app.core.storage import BlobStat
from app.domains.ai.provider import validate_model


class FakeBlobStore:
    """Dict-backed blob store.

    ``delays`` maps object keys to seconds to sleep before answering ``get``,
    and keys in ``failing`` raise on ``get`` or ``delete``. Every full read
    of a blob is recorded in ``reads``.
    """

    def __init__(self):
        self.blobs: dict[str, tuple[bytes, str | None]] = {}
        self.delays: dict[str, float] = {}
        self.failing: set[str] = set()
        self.deleted: list[str] = []
        self.reads: list[str] = []

    def put(self, object_key: str, data: bytes, content_type: str | None = None) -> None:
        self.blobs[object_key] = (data, content_type)

    async def generate_upload_url(self, object_key: str) -> str:
        return f"https://blobs.test/upload/{object_key}"

    async def get(self, object_key: str) -> bytes | None:
        await asyncio.sleep(self.delays.get(object_key, 0))
        if object_key in self.failing:
            raise ConnectionError(f"blob store unavailable for {object_key}")
        self.reads.append(object_key)
        blob = self.blobs.get(object_key)
        return blob[0] if blob else None

    async def sha256(self, object_key: str) -> str | None:
        blob = self.blobs.get(object_key)
        if blob is None:
            return None
        self.reads.append(object_key)
        return hashlib.sha256(blob[0]).hexdigest()

    async def get_url(self, object_key: str) -> str | None:
        if object_key not in self.blobs:
            return None
        return f"https://blobs.test/{object_key}"

    async def stat(self, object_key: str) -> BlobStat | None:
        blob = self.blobs.get(object_key)
        if blob is None:
            return None
        return BlobStat(size=len(blob[0]), content_type=blob[1])

    async def delete(self, object_key: str) -> None:
        if object_key in self.failing:
            raise ConnectionError(f"blob store unavailable for {object_key}")
        self.blobs.pop(object_key, None)
        self.deleted.append(object_key)


class FakeProviderError(Exception):
    """Shaped like a google-api-core error: HTTP status in ``code``."""

    def __init__(self, message: str, code: int | str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeChatModel:
    """Yields ``chunks`` in order, then raises ``error`` if one is set.

    ``fail_after`` is the number of chunks yielded before the error;
    ``0`` fails at stream open.
    """

    def __init__(
        self,
        model_id: str = "gemini-2.5-flash",
        chunks: Sequence[str] = (),
        error: Exception | None = None,
        fail_after: int | None = None,
        on_chunk=None,
    ):
        self.model_id = model_id
        self.chunks = list(chunks)
        self.error = error
        self.fail_after = len(self.chunks) if fail_after is None else fail_after
        self.on_chunk = on_chunk
        self.calls: list[tuple[list, float]] = []

    async def stream_text(self, messages, temperature):
        self.calls.append((list(messages), temperature))
        for index, chunk in enumerate(self.chunks):
            if self.error is not None and index >= self.fail_after:
                raise self.error
            if self.on_chunk is not None:
                await self.on_chunk(index, chunk)
            yield chunk
        if self.error is not None:
            raise self.error


class FakeProviderFactory:
    """Records the key and model it was asked for and hands out one model."""

    def __init__(self, model: FakeChatModel):
        self.model = model
        self.requests: list[tuple[str, str]] = []

    def __call__(self, api_key: str, model_id: str) -> FakeChatModel:
        self.requests.append((api_key, model_id))
        validate_model(model_id)
        self.model.model_id = model_id
        return self.model
