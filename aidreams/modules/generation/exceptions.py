from fastapi import status

from aidreams.api.core.exceptions.base import AIDreamsException
from aidreams.api.core.messages import MessageCode

QUOTA_EXHAUSTED_STATUSES = frozenset({402, 429})


class ProviderCallFailed(Exception):
    """An upstream provider call returned an error or an unusable body."""

    def __init__(self, provider: str, status_code: int | None, detail: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{provider} call failed ({status_code}): {detail}")

    @property
    def is_quota_exhausted(self) -> bool:
        """Quota or payment failure, evidence the key itself is spent."""
        return self.status_code in QUOTA_EXHAUSTED_STATUSES


class GenerationFailed(AIDreamsException):
    """Generic, caller-facing generation failure."""

    message_code = MessageCode.INTERNAL_ERROR

    def __init__(self, details: dict | None = None):
        super().__init__(
            self.message_code, status.HTTP_502_BAD_GATEWAY, details=details
        )


class StoryGenerationFailed(GenerationFailed):
    message_code = MessageCode.STORY_GENERATION_FAILED


class ImageGenerationFailed(GenerationFailed):
    message_code = MessageCode.IMAGE_GENERATION_FAILED
