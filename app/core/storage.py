"""Blob storage client for attachments (MinIO / S3 compatible)."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from minio import Minio
from minio.error import S3Error

from app.core.config import settings

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "NoSuchObject", "NoSuchBucket"}
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class BlobStat:
    size: int
    content_type: str | None


class BlobStore(Protocol):
    async def generate_upload_url(self, object_key: str) -> str: ...

    async def get(self, object_key: str) -> bytes | None: ...

    async def sha256(self, object_key: str) -> str | None: ...

    async def get_url(self, object_key: str) -> str | None: ...

    async def stat(self, object_key: str) -> BlobStat | None: ...

    async def delete(self, object_key: str) -> None: ...


class MinioBlobStore:
    """Blob store backed by a MinIO client.

    The MinIO SDK is synchronous, so every call is moved to a worker thread.
    """

    def __init__(self, client: Minio, bucket: str, url_expiry: timedelta):
        self.client = client
        self.bucket = bucket
        self.url_expiry = url_expiry

    async def ensure_bucket(self) -> None:
        exists = await asyncio.to_thread(self.client.bucket_exists, bucket_name=self.bucket)
        if not exists:
            await asyncio.to_thread(self.client.make_bucket, bucket_name=self.bucket)
            logger.info(f"Created bucket {self.bucket}")

    async def generate_upload_url(self, object_key: str) -> str:
        return await asyncio.to_thread(
            self.client.presigned_put_object,
            bucket_name=self.bucket,
            object_name=object_key,
            expires=self.url_expiry,
        )

    async def get(self, object_key: str) -> bytes | None:
        def _read() -> bytes | None:
            try:
                response = self.client.get_object(bucket_name=self.bucket, object_name=object_key)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    return None
                raise
            try:
                return response.read()
            finally:
                response.close()
                response.release_conn()

        return await asyncio.to_thread(_read)

    async def sha256(self, object_key: str) -> str | None:
        """Hex digest of an object, streamed in fixed-size chunks."""

        def _digest() -> str | None:
            try:
                response = self.client.get_object(bucket_name=self.bucket, object_name=object_key)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    return None
                raise
            try:
                digest = hashlib.sha256()
                for chunk in response.stream(_CHUNK_SIZE):
                    digest.update(chunk)
                return digest.hexdigest()
            finally:
                response.close()
                response.release_conn()

        return await asyncio.to_thread(_digest)

    async def get_url(self, object_key: str) -> str | None:
        if await self.stat(object_key) is None:
            return None
        return await asyncio.to_thread(
            self.client.presigned_get_object,
            bucket_name=self.bucket,
            object_name=object_key,
            expires=self.url_expiry,
        )

    async def stat(self, object_key: str) -> BlobStat | None:
        def _stat() -> BlobStat | None:
            try:
                obj = self.client.stat_object(bucket_name=self.bucket, object_name=object_key)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    return None
                raise
            return BlobStat(size=obj.size or 0, content_type=obj.content_type)

        return await asyncio.to_thread(_stat)

    async def delete(self, object_key: str) -> None:
        await asyncio.to_thread(self.client.remove_object, bucket_name=self.bucket, object_name=object_key)


_store: MinioBlobStore | None = None


def get_blob_store() -> BlobStore:
    """Return the process-wide blob store."""
    global _store
    if _store is None:
        client = Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        _store = MinioBlobStore(
            client,
            settings.minio_bucket,
            timedelta(seconds=settings.upload_url_expiry_seconds),
        )
    return _store


async def init_blob_store() -> None:
    """Create the attachment bucket at startup when storage is configured."""
    if not settings.has_file_storage:
        logger.warning("MinIO credentials not set, attachments are disabled")
        return
    await get_blob_store().ensure_bucket()
