"""User Settings Pydantic schemas for request/response validation."""

from uuid import UUID

from pydantic import Field, field_validator

from app.core.config import SUPPORTED_MODELS

from .base import BaseSchema


class UserSettingsResponse(BaseSchema):
    """Schema for user settings response data.

    ``selected_model`` is always resolved; an empty stored value reads back as
    the default model.
    """

    id: UUID
    user_id: str
    google_api_key: str
    selected_model: str


class UserSettingsUpdate(BaseSchema):
    """Schema for saving the API key and model choice."""

    google_api_key: str = Field(..., description="Google AI API key")
    selected_model: str = Field(default="", description="Supported model id, or empty for the default")

    @field_validator("selected_model")
    @classmethod
    def validate_selected_model(cls, v: str) -> str:
        """Allow only supported model ids or an empty string."""
        cleaned = v.strip()
        if cleaned and cleaned not in SUPPORTED_MODELS:
            raise ValueError(f"Unsupported model. Supported models: {', '.join(SUPPORTED_MODELS)}")
        return cleaned


class ModelInfo(BaseSchema):
    """A model the user can select."""

    id: str
    name: str
    description: str | None = None


class ModelListResponse(BaseSchema):
    models: list[ModelInfo]
    default_model: str
