# ruff: noqa: F403, F401
"""Schemas package initialization."""

# Import all schemas to ensure they're registered
from .base import *
from .ai import *
from .chat import *
from .files import *
from .settings import *
from .user import *

# Rebuild models after all schemas are loaded
ProviderMessage.model_rebuild()
GenerateResponse.model_rebuild()
