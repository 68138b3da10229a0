from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from aidreams.database.models import Base
from aidreams.utils.settings.database import DatabaseSettings

database_settings = DatabaseSettings()

async_engine = create_async_engine(
    database_settings.DATABASE_URL_ASYNC,
    echo=database_settings.DATABASE_ECHO,
    pool_size=database_settings.DATABASE_POOL_SIZE,
    pool_pre_ping=True,
)
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


async def create_tables(engine: AsyncEngine = async_engine) -> None:
    """Create any missing tables for the registered models."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
