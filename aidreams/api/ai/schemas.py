"""Generation API schemas."""

from pydantic import BaseModel, Field, field_validator

from aidreams.api.core.constants import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from aidreams.api.core.messages import APIResponse


class ImageRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description must not be blank")
        return value


class StoryRequest(ImageRequest):
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value


class CompleteDreamRequest(StoryRequest):
    include_image: bool = True


class StoryModel(BaseModel):
    story: str


class ImageModel(BaseModel):
    image: str


class CompleteDreamModel(BaseModel):
    story: str
    image: str | None = None
    warning: str | None = None


StoryResponse = APIResponse[StoryModel]
ImageResponse = APIResponse[ImageModel]
CompleteDreamResponse = APIResponse[CompleteDreamModel]
