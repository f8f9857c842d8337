"""
Models package initialization.
"""

from .base import Base, BaseModel, utcnow
from .conversation import Conversation
from .message import Message, MessageRole
from .stored_file import StoredFile
from .user_settings import UserSettings

__all__ = [
    "Base",
    "BaseModel",
    "utcnow",
    "UserSettings",
    "StoredFile",
    # Chat models
    "Conversation",
    "Message",
    "MessageRole",
]
