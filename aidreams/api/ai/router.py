from fastapi import APIRouter

from aidreams.api.ai.schemas import (
    CompleteDreamModel,
    CompleteDreamRequest,
    CompleteDreamResponse,
    ImageModel,
    ImageRequest,
    ImageResponse,
    StoryModel,
    StoryRequest,
    StoryResponse,
)
from aidreams.api.core.dependencies import CurrentUserIdDep, DreamGenerationServiceDep
from aidreams.api.core.messages import APIResponse, MessageCode
from aidreams.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/generate-story", response_model=StoryResponse)
async def generate_story(
    payload: StoryRequest,
    service: DreamGenerationServiceDep,
    user_id: CurrentUserIdDep,
) -> StoryResponse:
    """Generate a narrative from a dream title and description."""
    story = await service.generate_story(payload.title, payload.description)
    return APIResponse.success(
        message_code=MessageCode.STORY_GENERATED, data=StoryModel(story=story)
    )


@router.post("/generate-image", response_model=ImageResponse)
async def generate_image(
    payload: ImageRequest,
    service: DreamGenerationServiceDep,
    user_id: CurrentUserIdDep,
) -> ImageResponse:
    """Render a dream description as a base64 data URI image."""
    image = await service.generate_image(payload.description)
    return APIResponse.success(
        message_code=MessageCode.IMAGE_GENERATED, data=ImageModel(image=image)
    )


@router.post("/generate-complete", response_model=CompleteDreamResponse)
async def generate_complete_dream(
    payload: CompleteDreamRequest,
    service: DreamGenerationServiceDep,
    user_id: CurrentUserIdDep,
) -> CompleteDreamResponse:
    """Generate story and image together; the image is best effort."""
    result = await service.generate_complete_dream(
        payload.title, payload.description, include_image=payload.include_image
    )
    if result.warning:
        logger.info("Dream generated with warning", user_id=str(user_id))
    return APIResponse.success(
        message_code=MessageCode.DREAM_GENERATED,
        data=CompleteDreamModel(
            story=result.story, image=result.image, warning=result.warning
        ),
    )
