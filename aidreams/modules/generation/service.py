"""Dream generation: story and image provider calls around the key pool."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from aidreams.database.models import ProviderType
from aidreams.modules.generation.cleanup import clean_story_text
from aidreams.modules.generation.exceptions import (
    ImageGenerationFailed,
    ProviderCallFailed,
    StoryGenerationFailed,
)
from aidreams.modules.generation.fallback import FallbackGalleryService
from aidreams.modules.generation.prompts import build_image_prompt, build_story_prompt
from aidreams.modules.keys.key_pool import KeyPoolService, SelectedKey
from aidreams.utils.logger import get_logger

T = TypeVar("T")

FALLBACK_IMAGE_WARNING = (
    "Image generation failed; a fallback image from the gallery was used."
)
NO_FALLBACK_IMAGE_WARNING = (
    "Image generation failed and no fallback image is available."
)


class TextGenerationClient(Protocol):
    async def complete(self, api_key: str, prompt: str) -> str: ...


class ImageGenerationClient(Protocol):
    async def generate(self, api_key: str, prompt: str) -> str: ...


@dataclass
class CompleteDreamResult:
    story: str
    image: str | None = None
    warning: str | None = None


class DreamGenerationService:
    """Generates dream stories and illustrations with community keys.

    Every provider call follows the same key lifecycle: select the least-used
    key (charging it), call the provider, and retire the key if the provider
    answers with a quota or payment failure. Each step opens its own database
    session so the story and image tasks can run concurrently.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        text_client: TextGenerationClient,
        image_client: ImageGenerationClient,
        static_keys: dict[ProviderType, str] | None = None,
    ):
        self.session_factory = session_factory
        self.text_client = text_client
        self.image_client = image_client
        self.static_keys = static_keys or {}
        self.logger = get_logger(self.__class__.__name__)

    async def generate_story(self, title: str, description: str) -> str:
        prompt = build_story_prompt(title, description)
        try:
            raw_story = await self._call_provider(
                ProviderType.TEXT_GENERATION,
                lambda api_key: self.text_client.complete(api_key, prompt),
            )
            story = clean_story_text(raw_story)
            if not story:
                raise ValueError("completion was empty after cleanup")
        except Exception as e:
            self.logger.error(
                "Story generation failed", error=str(e), error_type=type(e).__name__
            )
            raise StoryGenerationFailed() from e
        return story

    async def generate_image(self, description: str) -> str:
        prompt = build_image_prompt(description)
        try:
            return await self._call_provider(
                ProviderType.IMAGE_GENERATION,
                lambda api_key: self.image_client.generate(api_key, prompt),
            )
        except Exception as e:
            self.logger.error(
                "Image generation failed", error=str(e), error_type=type(e).__name__
            )
            raise ImageGenerationFailed() from e

    async def generate_complete_dream(
        self, title: str, description: str, include_image: bool = True
    ) -> CompleteDreamResult:
        """Generate story and image concurrently.

        The story is mandatory and its failure fails the whole operation.
        An image failure is replaced by a random gallery cover plus a warning.
        """
        if not include_image:
            return CompleteDreamResult(
                story=await self.generate_story(title, description)
            )

        story_result, image_result = await asyncio.gather(
            self.generate_story(title, description),
            self.generate_image(description),
            return_exceptions=True,
        )

        if isinstance(story_result, BaseException):
            if isinstance(story_result, StoryGenerationFailed):
                raise story_result
            raise StoryGenerationFailed() from story_result

        if not isinstance(image_result, BaseException):
            return CompleteDreamResult(story=story_result, image=image_result)

        fallback_image = await self._pick_fallback_image()
        if fallback_image is None:
            self.logger.warning("Image failed and fallback gallery is empty")
            return CompleteDreamResult(
                story=story_result, warning=NO_FALLBACK_IMAGE_WARNING
            )

        self.logger.info("Image failed, substituted fallback cover")
        return CompleteDreamResult(
            story=story_result, image=fallback_image, warning=FALLBACK_IMAGE_WARNING
        )

    async def _call_provider(
        self,
        provider_type: ProviderType,
        call: Callable[[str], Awaitable[T]],
    ) -> T:
        async with self.session_factory() as session:
            selected = await KeyPoolService(session, self.static_keys).select_key(
                provider_type
            )

        try:
            return await call(selected.secret)
        except ProviderCallFailed as e:
            if e.is_quota_exhausted:
                await self._report_failure(selected)
            raise

    async def _report_failure(self, selected: SelectedKey) -> None:
        # Never allowed to fail the request that triggered it
        try:
            async with self.session_factory() as session:
                await KeyPoolService(session, self.static_keys).report_failure(
                    selected.provider_type, selected.secret
                )
        except Exception as e:
            self.logger.error(
                "Failed to retire exhausted key",
                provider=selected.provider_type.value,
                error=str(e),
            )

    async def _pick_fallback_image(self) -> str | None:
        try:
            async with self.session_factory() as session:
                return await FallbackGalleryService(session).pick_random()
        except Exception as e:
            self.logger.error("Fallback gallery lookup failed", error=str(e))
            return None
