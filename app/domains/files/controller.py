"""File attachment API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_blob_store, get_current_identity, get_db
from app.core.storage import BlobStore
from app.domains.files.service import FileService
from app.schemas.base import ResponseSchema
from app.schemas.files import FileMetadataResponse, FileUrlResponse, UploadUrlResponse
from app.schemas.user import UserIdentity
from models import StoredFile


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


def _metadata(stored: StoredFile) -> dict:
    return FileMetadataResponse(
        handle=stored.id,
        content_type=stored.content_type,
        size=stored.size,
        sha256=stored.sha256,
        uploaded_at=stored.uploaded_at,
    ).model_dump(mode="json")


@router.post("/upload-url", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def generate_upload_url(
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Reserve an attachment handle and return a presigned upload URL.

    The client PUTs the file to ``upload_url`` and then calls
    ``/api/files/{handle}/complete``.
    """
    service = FileService(db, blob_store)
    stored, upload_url = await service.generate_upload_url(identity)

    return ResponseSchema(
        status="success",
        message="Upload URL generated",
        data=UploadUrlResponse(handle=stored.id, upload_url=upload_url).model_dump(mode="json"),
    )


@router.post("/{handle}/complete", response_model=ResponseSchema)
async def complete_upload(
    handle: UUID = Path(..., description="Attachment handle"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    service = FileService(db, blob_store)
    stored = await service.complete_upload(handle, identity)

    return ResponseSchema(status="success", message="Upload recorded", data=_metadata(stored))


@router.get("/{handle}/url", response_model=ResponseSchema)
async def get_file_url(
    handle: UUID = Path(..., description="Attachment handle"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Get a download URL for an attachment in one of the caller's conversations."""
    service = FileService(db, blob_store)
    url = await service.get_url(handle, identity)

    return ResponseSchema(
        status="success",
        message="File URL retrieved",
        data=FileUrlResponse(handle=handle, url=url).model_dump(mode="json"),
    )


@router.get("/{handle}/metadata", response_model=ResponseSchema)
async def get_file_metadata(
    handle: UUID = Path(..., description="Attachment handle"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    service = FileService(db, blob_store)
    stored = await service.get_readable(handle, identity)

    return ResponseSchema(status="success", message="File metadata retrieved", data=_metadata(stored))


@router.delete("/{handle}", response_model=ResponseSchema)
async def delete_file(
    handle: UUID = Path(..., description="Attachment handle"),
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    service = FileService(db, blob_store)
    await service.delete(handle, identity)

    return ResponseSchema(status="success", message="File deleted successfully", data=None)
