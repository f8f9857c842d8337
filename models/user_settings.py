"""
User Settings model for storing the provider API key and model choice.

Each identity has at most one settings record. Uniqueness is enforced by the
settings service (lookup, then insert or patch) and backed by a unique index.
"""

from sqlalchemy import Column, String

from .base import BaseModel


class UserSettings(BaseModel):
    """
    Represents a user's generation settings.

    :ivar user_id: Subject of the owning identity.
    :type user_id: str
    :ivar google_api_key: Google AI API key, 1-500 characters.
    :type google_api_key: str
    :ivar selected_model: Supported model identifier, or empty for the default model.
    :type selected_model: str
    """

    __tablename__ = "user_settings"

    user_id = Column(String(255), nullable=False, unique=True, index=True)
    google_api_key = Column(String(500), nullable=False)
    selected_model = Column(String(50), nullable=False, default="")
