from uuid import UUID

from fastapi import APIRouter, status

from aidreams.api.core.dependencies import (
    CurrentUserIdDep,
    KeyContributionServiceDep,
)
from aidreams.api.core.exceptions.base import AIDreamsException
from aidreams.api.core.messages import APIResponse, MessageCode
from aidreams.api.keys.schemas import (
    ContributedKeyModel,
    KeyContributeRequest,
    KeyCreatedModel,
    KeyCreateResponse,
    KeyDeleteResponse,
    KeyListModel,
    KeyListResponse,
    KeyStatsResponse,
    ProviderStatsModel,
)

router = APIRouter(prefix="/api-keys", tags=["api-keys"])


@router.post(
    "/", response_model=KeyCreateResponse, status_code=status.HTTP_201_CREATED
)
async def contribute_key(
    key_data: KeyContributeRequest,
    service: KeyContributionServiceDep,
    user_id: CurrentUserIdDep,
) -> KeyCreateResponse:
    """Add a provider key to the community pool."""
    api_key = await service.contribute_key(
        contributor_id=user_id,
        provider_type=key_data.key_type,
        secret=key_data.api_key,
    )
    return APIResponse.success(
        message_code=MessageCode.API_KEY_CREATED,
        data=KeyCreatedModel(
            id=api_key.id,
            key_type=api_key.provider_type,
            created_at=api_key.created_at,
        ),
    )


@router.get("/my", response_model=KeyListResponse)
async def list_my_keys(
    service: KeyContributionServiceDep,
    user_id: CurrentUserIdDep,
) -> KeyListResponse:
    """List keys contributed by the caller."""
    keys = await service.list_contributed_keys(user_id)
    key_list = [ContributedKeyModel.model_validate(key) for key in keys]
    return APIResponse.success(data=KeyListModel(keys=key_list, total=len(key_list)))


@router.get("/stats", response_model=KeyStatsResponse)
async def pool_stats(service: KeyContributionServiceDep) -> KeyStatsResponse:
    """Per-provider pool size and usage."""
    stats = await service.pool_stats()
    return APIResponse.success(
        data=[
            ProviderStatsModel(
                key_type=s.provider_type,
                total_keys=s.total_keys,
                active_keys=s.active_keys,
                total_usage=s.total_usage,
            )
            for s in stats
        ]
    )


@router.delete("/{key_id}", response_model=KeyDeleteResponse)
async def delete_key(
    key_id: UUID,
    service: KeyContributionServiceDep,
    user_id: CurrentUserIdDep,
) -> KeyDeleteResponse:
    """Remove one of the caller's keys from the pool."""
    deleted = await service.delete_contributed_key(key_id, user_id)
    if not deleted:
        raise AIDreamsException(
            MessageCode.API_KEY_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            {"description": f"API key {key_id} not found or access denied"},
        )
    return APIResponse.success(
        message_code=MessageCode.API_KEY_DELETED, data={"deleted": True}
    )
