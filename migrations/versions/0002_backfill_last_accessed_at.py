"""Backfill last_accessed_at and make it required

Rows imported from the previous store may carry only a creation time. Copy
it into last_accessed_at, then drop nullability so there is a single
required access timestamp per record.

Revision ID: 0002_backfill_last_accessed_at
Revises: 0001_create_chat_tables
Create Date: 2026-10-16 09:40:03.771520

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0002_backfill_last_accessed_at'
down_revision: Union[str, None] = '0001_create_chat_tables'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    for table in ('conversations', 'messages'):
        op.execute(f'UPDATE {table} SET last_accessed_at = created_at WHERE last_accessed_at IS NULL')
        op.alter_column(table, 'last_accessed_at', existing_type=sa.DateTime(), nullable=False)


def downgrade() -> None:
    for table in ('messages', 'conversations'):
        op.alter_column(table, 'last_accessed_at', existing_type=sa.DateTime(), nullable=True)
