"""Celery tasks for data retention."""

import asyncio
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import all models to ensure they're registered before creating session
import models  # noqa: F401

from app.celery_app import celery_app
from app.core.config import settings
from app.core.storage import get_blob_store
from app.services.cleanup_service import CleanupService

logger = logging.getLogger(__name__)


def get_async_session() -> AsyncSession:
    """Create an async database session for Celery tasks.

    Each task runs in its own event loop, so it gets its own engine.
    """
    engine = create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )
    return async_sessionmaker(engine, expire_on_commit=False)()


@celery_app.task(name="app.tasks.cleanup_tasks.cleanup_old_conversations_task", bind=True)
def cleanup_old_conversations_task(self) -> dict[str, Any]:
    """Delete conversations idle longer than the retention period."""
    logger.info(f"Starting old conversation cleanup (Task ID: {self.request.id})")

    try:
        result = asyncio.run(_cleanup_old_conversations_async())
        logger.info(f"Old conversation cleanup completed: {result}")
        return result

    except Exception as e:
        logger.error(f"Old conversation cleanup failed: {str(e)}")
        raise self.retry(exc=e, countdown=60 * 5, max_retries=3)


@celery_app.task(name="app.tasks.cleanup_tasks.cleanup_orphaned_files_task", bind=True)
def cleanup_orphaned_files_task(self) -> dict[str, Any]:
    """Delete attachments no message references."""
    logger.info(f"Starting orphaned file cleanup (Task ID: {self.request.id})")

    try:
        result = asyncio.run(_cleanup_orphaned_files_async())
        logger.info(f"Orphaned file cleanup completed: {result}")
        return result

    except Exception as e:
        logger.error(f"Orphaned file cleanup failed: {str(e)}")
        raise self.retry(exc=e, countdown=60 * 5, max_retries=3)


async def _cleanup_old_conversations_async() -> dict[str, Any]:
    session = get_async_session()
    try:
        return await CleanupService(session, get_blob_store()).cleanup_old_conversations()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await session.bind.dispose()


async def _cleanup_orphaned_files_async() -> dict[str, Any]:
    session = get_async_session()
    try:
        return await CleanupService(session, get_blob_store()).cleanup_orphaned_files()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await session.bind.dispose()
