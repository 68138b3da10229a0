"""Test factories for AI Dreams models."""

from .base import AsyncSQLAlchemyModelFactory
from .api_keys import CommunityApiKeyFactory
from .covers import CoverFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "CommunityApiKeyFactory",
    "CoverFactory",
]
