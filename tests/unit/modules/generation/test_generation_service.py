"""Tests for the dream generation orchestrator and its key lifecycle."""

import asyncio

import pytest
import pytest_asyncio

from aidreams.api.core.messages import MessageCode
from aidreams.database.models import ProviderType
from aidreams.modules.generation.exceptions import (
    ImageGenerationFailed,
    ProviderCallFailed,
    StoryGenerationFailed,
)
from aidreams.modules.generation.service import (
    FALLBACK_IMAGE_WARNING,
    NO_FALLBACK_IMAGE_WARNING,
    DreamGenerationService,
)
from aidreams.modules.keys.key_pool import KeyPoolService, NoKeyAvailable
from tests.utils.fakes import FAKE_IMAGE_DATA_URI, FakeImageClient, FakeTextClient

TITLE = "The Flight"
DESCRIPTION = "I was flying over my childhood home."


def make_service(session_factory, text_client=None, image_client=None, static_keys=None):
    return DreamGenerationService(
        session_factory=session_factory,
        text_client=text_client or FakeTextClient(),
        image_client=image_client or FakeImageClient(),
        static_keys=static_keys,
    )


class TestGenerateStory:
    @pytest.mark.asyncio
    async def test_story_is_cleaned_and_key_charged(
        self, session_factory, db_session, api_key_factory
    ):
        key = await api_key_factory.create_async(db_session, usage_count=2)
        text_client = FakeTextClient(story="**STORY:** You glide over rooftops.")
        service = make_service(session_factory, text_client=text_client)

        story = await service.generate_story(TITLE, DESCRIPTION)

        assert story == "You glide over rooftops."
        assert text_client.calls[0][0] == key.secret
        assert TITLE in text_client.calls[0][1]
        assert DESCRIPTION in text_client.calls[0][1]
        await db_session.refresh(key)
        assert key.usage_count == 3
        assert key.is_active is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [429, 402])
    async def test_quota_failure_retires_key(
        self, session_factory, db_session, api_key_factory, status_code
    ):
        key = await api_key_factory.create_async(db_session)
        service = make_service(
            session_factory, text_client=FakeTextClient(status_code=status_code)
        )

        with pytest.raises(StoryGenerationFailed) as exc_info:
            await service.generate_story(TITLE, DESCRIPTION)

        assert exc_info.value.message_code == MessageCode.STORY_GENERATION_FAILED
        await db_session.refresh(key)
        assert key.is_active is False
        # Charged at selection even though the call failed
        assert key.usage_count == 1

    @pytest.mark.asyncio
    async def test_server_error_keeps_key_active(
        self, session_factory, db_session, api_key_factory
    ):
        key = await api_key_factory.create_async(db_session)
        service = make_service(
            session_factory, text_client=FakeTextClient(status_code=500)
        )

        with pytest.raises(StoryGenerationFailed):
            await service.generate_story(TITLE, DESCRIPTION)

        await db_session.refresh(key)
        assert key.is_active is True
        assert key.usage_count == 1

    @pytest.mark.asyncio
    async def test_no_key_available(self, session_factory):
        text_client = FakeTextClient()
        service = make_service(session_factory, text_client=text_client)

        with pytest.raises(StoryGenerationFailed) as exc_info:
            await service.generate_story(TITLE, DESCRIPTION)

        assert isinstance(exc_info.value.__cause__, NoKeyAvailable)
        assert text_client.calls == []

    @pytest.mark.asyncio
    async def test_environment_key_used_when_pool_empty(self, session_factory):
        text_client = FakeTextClient()
        service = make_service(
            session_factory,
            text_client=text_client,
            static_keys={ProviderType.TEXT_GENERATION: "sk-env-text"},
        )

        await service.generate_story(TITLE, DESCRIPTION)

        assert text_client.calls[0][0] == "sk-env-text"

    @pytest.mark.asyncio
    async def test_empty_story_after_cleanup_fails(
        self, session_factory, db_session, api_key_factory
    ):
        await api_key_factory.create_async(db_session)
        service = make_service(
            session_factory, text_client=FakeTextClient(story="<s>**</s>")
        )

        with pytest.raises(StoryGenerationFailed):
            await service.generate_story(TITLE, DESCRIPTION)

    @pytest.mark.asyncio
    async def test_retirement_error_does_not_mask_failure(
        self, session_factory, db_session, api_key_factory, monkeypatch
    ):
        await api_key_factory.create_async(db_session)

        async def broken_report_failure(self, provider_type, secret):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(KeyPoolService, "report_failure", broken_report_failure)
        service = make_service(
            session_factory, text_client=FakeTextClient(status_code=429)
        )

        with pytest.raises(StoryGenerationFailed) as exc_info:
            await service.generate_story(TITLE, DESCRIPTION)

        assert isinstance(exc_info.value.__cause__, ProviderCallFailed)


class TestGenerateImage:
    @pytest.mark.asyncio
    async def test_image_generated_with_dreamlike_prompt(
        self, session_factory, db_session, api_key_factory
    ):
        await api_key_factory.create_async(
            db_session, provider_type=ProviderType.IMAGE_GENERATION
        )
        image_client = FakeImageClient()
        service = make_service(session_factory, image_client=image_client)

        image = await service.generate_image(DESCRIPTION)

        assert image == FAKE_IMAGE_DATA_URI
        assert image_client.calls[0][1].endswith(DESCRIPTION)

    @pytest.mark.asyncio
    async def test_image_failure_is_not_substituted(
        self, session_factory, db_session, api_key_factory, cover_factory
    ):
        await cover_factory.create_async(db_session)
        key = await api_key_factory.create_async(
            db_session, provider_type=ProviderType.IMAGE_GENERATION
        )
        service = make_service(
            session_factory, image_client=FakeImageClient(status_code=402)
        )

        with pytest.raises(ImageGenerationFailed):
            await service.generate_image(DESCRIPTION)

        await db_session.refresh(key)
        assert key.is_active is False


class TestGenerateCompleteDream:
    @pytest_asyncio.fixture
    async def both_keys(self, db_session, api_key_factory):
        text_key = await api_key_factory.create_async(db_session)
        image_key = await api_key_factory.create_async(
            db_session, provider_type=ProviderType.IMAGE_GENERATION
        )
        return text_key, image_key

    @pytest.mark.asyncio
    async def test_story_and_image(self, session_factory, both_keys):
        service = make_service(session_factory)

        result = await service.generate_complete_dream(TITLE, DESCRIPTION)

        assert result.story
        assert result.image == FAKE_IMAGE_DATA_URI
        assert result.warning is None

    @pytest.mark.asyncio
    async def test_image_quota_failure_uses_fallback_cover(
        self, session_factory, db_session, cover_factory, both_keys
    ):
        _, image_key = both_keys
        covers = await cover_factory.create_batch_async(db_session, 2)
        service = make_service(
            session_factory, image_client=FakeImageClient(status_code=429)
        )

        result = await service.generate_complete_dream(TITLE, DESCRIPTION)

        assert result.story
        assert result.image in {cover.url for cover in covers}
        assert result.warning == FALLBACK_IMAGE_WARNING
        await db_session.refresh(image_key)
        assert image_key.is_active is False

    @pytest.mark.asyncio
    async def test_image_failure_with_empty_gallery(self, session_factory, both_keys):
        service = make_service(
            session_factory, image_client=FakeImageClient(status_code=500)
        )

        result = await service.generate_complete_dream(TITLE, DESCRIPTION)

        assert result.story
        assert result.image is None
        assert result.warning == NO_FALLBACK_IMAGE_WARNING

    @pytest.mark.asyncio
    async def test_story_failure_fails_whole_operation(
        self, session_factory, both_keys
    ):
        image_client = FakeImageClient()
        service = make_service(
            session_factory,
            text_client=FakeTextClient(status_code=500),
            image_client=image_client,
        )

        with pytest.raises(StoryGenerationFailed):
            await service.generate_complete_dream(TITLE, DESCRIPTION)

        assert len(image_client.calls) == 1

    @pytest.mark.asyncio
    async def test_without_image_skips_image_provider(
        self, session_factory, both_keys
    ):
        image_client = FakeImageClient()
        service = make_service(session_factory, image_client=image_client)

        result = await service.generate_complete_dream(
            TITLE, DESCRIPTION, include_image=False
        )

        assert result.story
        assert result.image is None
        assert result.warning is None
        assert image_client.calls == []

    @pytest.mark.asyncio
    async def test_story_and_image_run_concurrently(self, session_factory, both_keys):
        # The story call only finishes once the image call has started
        image_started = asyncio.Event()
        service = make_service(
            session_factory,
            text_client=FakeTextClient(wait_for=image_started),
            image_client=FakeImageClient(started=image_started),
        )

        result = await service.generate_complete_dream(TITLE, DESCRIPTION)

        assert result.story
        assert result.image == FAKE_IMAGE_DATA_URI
