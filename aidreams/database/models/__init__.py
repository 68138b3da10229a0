"""Database models for the AI Dreams API."""

from .api_keys import CommunityApiKey, ProviderType
from .base import Base
from .covers import Cover

__all__ = [
    # Base
    "Base",
    # Enums
    "ProviderType",
    # Models
    "CommunityApiKey",
    "Cover",
]
