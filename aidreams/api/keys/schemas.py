"""Community key API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from aidreams.api.core.constants import MAX_API_KEY_LENGTH
from aidreams.api.core.messages import APIResponse
from aidreams.database.models import ProviderType


class KeyContributeRequest(BaseModel):
    key_type: ProviderType
    api_key: str = Field(..., min_length=1, max_length=MAX_API_KEY_LENGTH)

    @field_validator("api_key")
    @classmethod
    def api_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API key must not be blank")
        return value


class ContributedKeyModel(BaseModel):
    """A contributed key as shown to its owner. Never carries the secret."""

    id: UUID
    key_type: ProviderType = Field(validation_alias="provider_type")
    usage_count: int
    is_active: bool
    last_used_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class KeyCreatedModel(BaseModel):
    id: UUID
    key_type: ProviderType
    created_at: datetime


class ProviderStatsModel(BaseModel):
    key_type: ProviderType
    total_keys: int
    active_keys: int
    total_usage: int


class KeyListModel(BaseModel):
    keys: list[ContributedKeyModel]
    total: int


KeyCreateResponse = APIResponse[KeyCreatedModel]
KeyListResponse = APIResponse[KeyListModel]
KeyStatsResponse = APIResponse[list[ProviderStatsModel]]
KeyDeleteResponse = APIResponse[dict[str, bool]]
