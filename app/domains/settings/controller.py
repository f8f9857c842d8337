"""Settings controller endpoints for the user's API key and model."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings as app_settings
from app.core.dependencies import get_current_identity
from app.database import get_db
from app.domains.settings.service import SettingsService
from app.exceptions.chat import SettingsNotFoundError
from app.schemas.base import ResponseSchema
from app.schemas.settings import ModelListResponse, UserSettingsResponse, UserSettingsUpdate
from app.schemas.user import UserIdentity


router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("/models", response_model=ModelListResponse)
async def get_available_models():
    """List the models a user can select."""
    return ModelListResponse(
        models=SettingsService.get_available_models(),
        default_model=app_settings.default_model,
    )


@router.get("", response_model=UserSettingsResponse)
async def get_settings(
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get current user's settings.

    An empty stored model reads back as the default model.
    """
    settings_service = SettingsService(db)
    user_settings = await settings_service.get_user_settings(identity)
    if user_settings is None:
        raise SettingsNotFoundError()
    return UserSettingsResponse.model_validate(user_settings)


@router.put("", response_model=UserSettingsResponse)
async def update_settings(
    update_data: UserSettingsUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Save current user's API key and model.

    Saving twice with the same values leaves a single settings record.
    """
    settings_service = SettingsService(db)
    updated_settings = await settings_service.upsert(
        identity,
        google_api_key=update_data.google_api_key,
        selected_model=update_data.selected_model,
    )
    return UserSettingsResponse.model_validate(updated_settings)


@router.delete("", response_model=ResponseSchema)
async def delete_settings(
    identity: UserIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete current user's settings."""
    settings_service = SettingsService(db)
    deleted = await settings_service.delete_user_settings(identity)
    if not deleted:
        raise SettingsNotFoundError()
    return ResponseSchema(status="success", message="Settings deleted successfully", data=None)
