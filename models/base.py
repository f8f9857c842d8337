"""
Declarative base and column types shared by the chat models.

Every record gets a UUID primary key and creation/update timestamps. The key
type maps to PostgreSQL's native UUID and to a 36-character string on SQLite,
so the same models run against the production database and the test database.
Timestamps are stored as naive UTC.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, TypeDecorator
from sqlalchemy.dialects.postgresql import UUID as PostgreSQLUUID
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time without tzinfo, matching the stored column values."""
    return datetime.now(UTC).replace(tzinfo=None)


class UUID(TypeDecorator):
    """UUID column: native on PostgreSQL, CHAR(36) text elsewhere."""
    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgreSQLUUID())
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class BaseModel(Base):
    """
    Abstract base for conversations, messages, settings and stored files.

    :ivar id: Record identifier; for stored files this is the attachment handle.
    :type id: UUID
    :ivar created_at: When the record was created.
    :type created_at: datetime
    :ivar updated_at: When the record was last written.
    :type updated_at: datetime
    """
    __abstract__ = True

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
