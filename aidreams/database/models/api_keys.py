"""Community API key model."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Uuid
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ProviderType(str, Enum):
    """External AI provider a key unlocks."""

    TEXT_GENERATION = "openrouter"
    IMAGE_GENERATION = "stable_diffusion"


class CommunityApiKey(Base):
    """A provider credential contributed by a user to the shared pool."""

    __tablename__ = "community_api_keys"
    __table_args__ = (
        Index("ix_community_api_keys_provider_active", "provider_type", "is_active"),
        Index("ix_community_api_keys_usage_count", "usage_count"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    provider_type: Mapped[ProviderType] = mapped_column(
        SQLAlchemyEnum(
            ProviderType,
            native_enum=False,
            length=32,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    secret: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    contributor_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
