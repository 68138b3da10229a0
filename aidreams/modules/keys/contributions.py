"""Management of user-contributed provider keys."""

from dataclasses import dataclass
from uuid import UUID

from fastapi import status
from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import IntegrityError

from aidreams.api.core.exceptions.base import AIDreamsException
from aidreams.api.core.messages import MessageCode
from aidreams.core.base import BaseService
from aidreams.database.models import CommunityApiKey, ProviderType


@dataclass
class ProviderPoolStats:
    provider_type: ProviderType
    total_keys: int
    active_keys: int
    total_usage: int


class KeyContributionService(BaseService):
    async def contribute_key(
        self, contributor_id: UUID, provider_type: ProviderType, secret: str
    ) -> CommunityApiKey:
        secret = secret.strip()
        existing = await self.db.execute(
            select(CommunityApiKey.id).where(CommunityApiKey.secret == secret)
        )
        if existing.first() is not None:
            raise AIDreamsException(
                MessageCode.API_KEY_ALREADY_REGISTERED, status.HTTP_409_CONFLICT
            )

        api_key = CommunityApiKey(
            provider_type=provider_type,
            secret=secret,
            contributor_id=contributor_id,
        )
        self.db.add(api_key)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent contribution of the same secret won the insert
            await self.db.rollback()
            raise AIDreamsException(
                MessageCode.API_KEY_ALREADY_REGISTERED, status.HTTP_409_CONFLICT
            )
        await self.db.refresh(api_key)
        self.logger.info(
            "Community key contributed",
            provider=provider_type.value,
            key_id=str(api_key.id),
            contributor_id=str(contributor_id),
        )
        return api_key

    async def list_contributed_keys(self, contributor_id: UUID) -> list[CommunityApiKey]:
        stmt = (
            select(CommunityApiKey)
            .where(CommunityApiKey.contributor_id == contributor_id)
            .order_by(CommunityApiKey.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def delete_contributed_key(self, key_id: UUID, contributor_id: UUID) -> bool:
        """Remove a key owned by the contributor, regardless of in-flight use."""
        stmt = delete(CommunityApiKey).where(
            CommunityApiKey.id == key_id,
            CommunityApiKey.contributor_id == contributor_id,
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        deleted = result.rowcount > 0
        if deleted:
            self.logger.info("Community key removed", key_id=str(key_id))
        return deleted

    async def pool_stats(self) -> list[ProviderPoolStats]:
        stmt = select(
            CommunityApiKey.provider_type,
            func.count(CommunityApiKey.id),
            func.sum(case((CommunityApiKey.is_active.is_(True), 1), else_=0)),
            func.sum(CommunityApiKey.usage_count),
        ).group_by(CommunityApiKey.provider_type)
        rows = {row[0]: row for row in (await self.db.execute(stmt)).all()}

        stats = []
        for provider_type in ProviderType:
            row = rows.get(provider_type)
            stats.append(
                ProviderPoolStats(
                    provider_type=provider_type,
                    total_keys=row[1] if row else 0,
                    active_keys=int(row[2] or 0) if row else 0,
                    total_usage=int(row[3] or 0) if row else 0,
                )
            )
        return stats
