"""
Stored file model holding blob metadata keyed by attachment handle.
"""

from sqlalchemy import BigInteger, Column, DateTime, String

from .base import BaseModel


class StoredFile(BaseModel):
    """
    Represents an uploaded blob.

    The row id is the attachment handle that messages reference. Content type,
    size and digest are filled in once the upload is confirmed.
    """

    __tablename__ = "stored_files"

    user_id = Column(String(255), nullable=False, index=True)
    object_key = Column(String(500), nullable=False, unique=True)
    content_type = Column(String(255), nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    sha256 = Column(String(64), nullable=True)
    uploaded_at = Column(DateTime, nullable=True)
