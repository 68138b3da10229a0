"""Factory for CommunityApiKey models."""

from datetime import datetime, timezone

import factory
from aidreams.database.models import CommunityApiKey, ProviderType
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class CommunityApiKeyFactory(AsyncSQLAlchemyModelFactory[CommunityApiKey]):
    """Factory for creating CommunityApiKey instances."""

    class Meta:
        model = CommunityApiKey

    id = UUIDFactory()
    provider_type = ProviderType.TEXT_GENERATION
    secret = factory.Sequence(lambda n: f"sk-test-{n:06d}")
    contributor_id = UUIDFactory()
    usage_count = 0
    is_active = True
    last_used_at = None
    created_at = factory.LazyFunction(lambda: datetime.now(timezone.utc))
