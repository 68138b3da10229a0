"""Static gallery of cover images substituted when image generation fails."""

import random

from sqlalchemy import func, select

from aidreams.core.base import BaseService
from aidreams.database.models import Cover


class FallbackGalleryService(BaseService):
    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Cover.id)))
        return result.scalar_one()

    async def pick_random(self) -> str | None:
        """Uniformly random cover URL, or None for an empty gallery."""
        total = await self.count()
        if total == 0:
            return None
        index = random.randrange(total)
        stmt = select(Cover.url).order_by(Cover.id).offset(index).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
