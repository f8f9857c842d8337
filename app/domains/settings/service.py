# app/domains/settings/service.py
"""Settings service for the user's API key and model selection."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SUPPORTED_MODELS, settings
from app.exceptions.base import validate_string
from app.schemas.settings import ModelInfo
from app.schemas.user import UserIdentity
from app.shared.access import require_identity
from models import UserSettings


AVAILABLE_MODELS: list[ModelInfo] = [
    ModelInfo(
        id="gemini-2.5-flash",
        name="Gemini 2.5 Flash",
        description="Fast and efficient model for most conversations",
    ),
    ModelInfo(
        id="gemini-2.5-pro",
        name="Gemini 2.5 Pro",
        description="More capable model for complex tasks and reasoning",
    ),
    ModelInfo(
        id="gemini-1.5-flash",
        name="Gemini 1.5 Flash",
        description="Previous generation fast model",
    ),
    ModelInfo(
        id="gemini-1.5-pro",
        name="Gemini 1.5 Pro",
        description="Previous generation pro model",
    ),
]


def resolve_model(selected_model: str | None) -> str:
    """Return the stored model id, or the default model when it is empty."""
    return (selected_model or "").strip() or settings.default_model


class SettingsService:
    """Service for managing per-user generation settings."""

    def __init__(self, db: AsyncSession):
        """Initialize service with a database session."""
        self.db = db

    async def _find(self, user_id: str) -> UserSettings | None:
        result = await self.db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_user_settings(self, identity: UserIdentity | None) -> UserSettings | None:
        """
        Get the caller's settings with ``selected_model`` resolved.

        Args:
            identity: The caller

        Returns:
            UserSettings | None: The settings, or None if nothing was saved yet
        """
        identity = require_identity(identity)
        user_settings = await self._find(identity.subject)
        if user_settings is None:
            return None

        # Resolve for the reader only; the stored value is left as-is
        self.db.expunge(user_settings)
        user_settings.selected_model = resolve_model(user_settings.selected_model)
        return user_settings

    async def upsert(self, identity: UserIdentity | None, google_api_key: str, selected_model: str) -> UserSettings:
        """
        Save the caller's API key and model, inserting or patching the single record.

        Args:
            identity: The caller
            google_api_key: Google AI API key (1-500 characters)
            selected_model: Supported model id; blank stores the default model

        Returns:
            UserSettings: The saved settings

        Raises:
            ValidationError: If the key is empty or too long
            SQLAlchemyError: If database operation fails
        """
        identity = require_identity(identity)
        clean_key = validate_string(google_api_key, "API Key", 1, settings.max_api_key_length)
        clean_model = resolve_model(selected_model)

        existing = await self._find(identity.subject)
        try:
            if existing is not None:
                existing.google_api_key = clean_key
                existing.selected_model = clean_model
                user_settings = existing
            else:
                user_settings = UserSettings(
                    user_id=identity.subject,
                    google_api_key=clean_key,
                    selected_model=clean_model,
                )
                self.db.add(user_settings)

            await self.db.commit()
            await self.db.refresh(user_settings)
            return user_settings
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise e

    async def delete_user_settings(self, identity: UserIdentity | None) -> bool:
        """
        Delete the caller's settings.

        Returns:
            bool: True if deleted, False if settings didn't exist
        """
        identity = require_identity(identity)
        user_settings = await self._find(identity.subject)

        if not user_settings:
            return False

        try:
            await self.db.delete(user_settings)
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise e

    @staticmethod
    def get_available_models() -> list[ModelInfo]:
        return list(AVAILABLE_MODELS)

    @staticmethod
    def is_valid_model(model_id: str) -> bool:
        return model_id in SUPPORTED_MODELS
