"""File attachment schemas."""

from datetime import datetime
from uuid import UUID

from .base import BaseSchema


class UploadUrlResponse(BaseSchema):
    """Presigned upload target for a new attachment."""

    handle: UUID
    upload_url: str


class FileMetadataResponse(BaseSchema):
    """Metadata recorded for an uploaded attachment."""

    handle: UUID
    content_type: str | None
    size: int
    sha256: str | None
    uploaded_at: datetime | None


class FileUrlResponse(BaseSchema):
    handle: UUID
    url: str
