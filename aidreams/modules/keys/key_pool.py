"""Community key pool: least-used selection, usage accounting and retirement."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from aidreams.core.base import BaseService
from aidreams.database.models import CommunityApiKey, ProviderType


class KeySource(str, Enum):
    COMMUNITY = "community"
    ENVIRONMENT = "environment"


@dataclass(frozen=True)
class SelectedKey:
    """The credential handed to a provider call."""

    provider_type: ProviderType
    secret: str
    source: KeySource
    record_id: UUID | None = None


class NoKeyAvailable(Exception):
    """No active community key and no environment key for a provider."""

    def __init__(self, provider_type: ProviderType):
        self.provider_type = provider_type
        super().__init__(f"No API key available for {provider_type.value}")


class KeyPoolService(BaseService):
    """Brokers provider credentials out of the community pool.

    Usage is charged when a key is selected, not when the provider call
    succeeds, so failed calls still count against the key.
    """

    def __init__(
        self,
        db: AsyncSession,
        static_keys: dict[ProviderType, str] | None = None,
    ):
        super().__init__(db)
        self.static_keys = static_keys or {}

    async def select_key(self, provider_type: ProviderType) -> SelectedKey:
        """Pick the least-used active key, falling back to the environment key.

        Raises:
            NoKeyAvailable: when the pool is empty and no environment key is set.
        """
        stmt = (
            select(CommunityApiKey)
            .where(
                CommunityApiKey.provider_type == provider_type,
                CommunityApiKey.is_active.is_(True),
            )
            .order_by(CommunityApiKey.usage_count.asc(), CommunityApiKey.created_at)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        record = result.scalar_one_or_none()

        if record is not None:
            record_id, secret = record.id, record.secret
            await self.record_usage(record_id)
            self.logger.info(
                "Selected community key",
                provider=provider_type.value,
                key_id=str(record_id),
            )
            return SelectedKey(
                provider_type=provider_type,
                secret=secret,
                source=KeySource.COMMUNITY,
                record_id=record_id,
            )

        static_key = self.static_keys.get(provider_type)
        if static_key:
            self.logger.info(
                "Community pool empty, using environment key",
                provider=provider_type.value,
            )
            return SelectedKey(
                provider_type=provider_type,
                secret=static_key,
                source=KeySource.ENVIRONMENT,
            )

        self.logger.warning("No API key available", provider=provider_type.value)
        raise NoKeyAvailable(provider_type)

    async def record_usage(self, record_id: UUID) -> bool:
        """Atomically bump usage_count and stamp last_used_at."""
        stmt = (
            update(CommunityApiKey)
            .where(CommunityApiKey.id == record_id)
            .values(
                usage_count=CommunityApiKey.usage_count + 1,
                last_used_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        if result.rowcount == 0:
            self.logger.warning(
                "Usage not recorded, key no longer exists", key_id=str(record_id)
            )
            return False
        return True

    async def report_failure(self, provider_type: ProviderType, secret: str) -> bool:
        """Retire the key matching provider and secret.

        Idempotent. Returns False when no record matches, which is the case
        for environment keys.
        """
        stmt = (
            update(CommunityApiKey)
            .where(
                CommunityApiKey.provider_type == provider_type,
                CommunityApiKey.secret == secret,
            )
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        retired = result.rowcount > 0
        if retired:
            self.logger.warning("Retired exhausted key", provider=provider_type.value)
        return retired
