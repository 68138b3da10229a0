from typing import Annotated, AsyncGenerator
from uuid import UUID

from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from aidreams.api.core.exceptions.base import AIDreamsException
from aidreams.api.core.messages import MessageCode
from aidreams.modules.generation.providers import OpenRouterClient, StabilityImageClient
from aidreams.modules.generation.service import DreamGenerationService
from aidreams.modules.keys.contributions import KeyContributionService
from aidreams.modules.rate_limit.limiter import RateLimiter, ip_cache_key
from aidreams.modules.user.tokens import InvalidTokenError, decode_access_token
from aidreams.utils.logger import get_client_ip, get_logger
from aidreams.utils.settings.providers import ProviderSettings
from aidreams.utils.settings.redis import RedisSettings

logger = get_logger(__name__)


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Session factory stored on app state by the lifespan."""
    return request.app.state.session_factory


async def get_db_session(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_session_factory)
    ],
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    async with session_factory() as session:
        yield session


def get_provider_settings() -> ProviderSettings:
    return ProviderSettings()


async def get_key_contribution_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> KeyContributionService:
    """Get key contribution service with database session."""
    return KeyContributionService(db)


async def get_dream_generation_service(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_session_factory)
    ],
    settings: Annotated[ProviderSettings, Depends(get_provider_settings)],
) -> DreamGenerationService:
    """Get dream generation service wired to the configured providers."""
    return DreamGenerationService(
        session_factory=session_factory,
        text_client=OpenRouterClient.from_settings(settings),
        image_client=StabilityImageClient.from_settings(settings),
        static_keys=settings.static_keys(),
    )


async def get_current_user_id(request: Request) -> UUID:
    """Resolve the caller from the Authorization bearer token."""
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        raise AIDreamsException(MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED)

    auth_parts = authorization.split(" ")
    if len(auth_parts) != 2 or auth_parts[0].lower() != "bearer":
        raise AIDreamsException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Expected 'Authorization: Bearer <token>'"},
        )

    try:
        claims = decode_access_token(auth_parts[1])
    except InvalidTokenError:
        raise AIDreamsException(MessageCode.INVALID_TOKEN, status.HTTP_401_UNAUTHORIZED)
    return claims.user_id



def get_rate_limit_settings() -> RedisSettings:
    return RedisSettings()


async def enforce_ip_rate_limit(
    request: Request,
    settings: Annotated[RedisSettings, Depends(get_rate_limit_settings)],
) -> None:
    """Reject callers over the per-IP request budget with 429."""
    ip_address = get_client_ip(request) or "unknown"
    result = await RateLimiter(request.app.state.redis).is_allowed(
        ip_cache_key(ip_address),
        settings.RATE_LIMIT_REQUESTS,
        settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    if result.is_allowed:
        return

    logger.warning(
        "Rate limit exceeded",
        ip_address=ip_address,
        limit=result.limit,
        window_seconds=result.window_seconds,
    )
    raise AIDreamsException(
        MessageCode.RATE_LIMIT_EXCEEDED,
        status.HTTP_429_TOO_MANY_REQUESTS,
        details={
            "limit": result.limit,
            "window_seconds": result.window_seconds,
            "retry_after": result.retry_after,
        },
        headers={
            "Retry-After": str(result.retry_after),
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": "0",
        },
    )


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
KeyContributionServiceDep = Annotated[
    KeyContributionService, Depends(get_key_contribution_service)
]
DreamGenerationServiceDep = Annotated[
    DreamGenerationService, Depends(get_dream_generation_service)
]
CurrentUserIdDep = Annotated[UUID, Depends(get_current_user_id)]
