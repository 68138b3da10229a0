"""HTTP clients for the external text and image generation providers."""

import asyncio
import base64
from typing import Any

import aiohttp

from aidreams.modules.generation.exceptions import ProviderCallFailed
from aidreams.modules.generation.prompts import (
    IMAGE_CFG_SCALE,
    IMAGE_SAMPLES,
    IMAGE_SIZE,
    IMAGE_STEPS,
    STORY_MAX_TOKENS,
    STORY_TEMPERATURE,
)
from aidreams.utils.logger import get_logger
from aidreams.utils.settings.providers import ProviderSettings

logger = get_logger(__name__)

DEFAULT_IMAGE_CONTENT_TYPE = "image/png"
# Upstream error bodies are only logged, never returned
MAX_ERROR_BODY_CHARS = 500


def _client_timeout(timeout: float | None) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(total=timeout)


class OpenRouterClient:
    """Chat completion client for story generation."""

    provider = "openrouter"

    def __init__(
        self,
        url: str,
        model: str,
        referer: str,
        title: str,
        timeout: float | None = None,
    ):
        self.url = url
        self.model = model
        self.referer = referer
        self.title = title
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: ProviderSettings) -> "OpenRouterClient":
        return cls(
            url=settings.OPENROUTER_URL,
            model=settings.OPENROUTER_MODEL,
            referer=settings.OPENROUTER_REFERER,
            title=settings.OPENROUTER_TITLE,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
        )

    async def complete(self, api_key: str, prompt: str) -> str:
        """Return the raw text of the first completion choice."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": STORY_MAX_TOKENS,
            "temperature": STORY_TEMPERATURE,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

        async with aiohttp.ClientSession(timeout=_client_timeout(self.timeout)) as session:
            try:
                async with session.post(
                    self.url, json=payload, headers=headers
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        logger.error(
                            "OpenRouter API error",
                            status=response.status,
                            body=error_text[:MAX_ERROR_BODY_CHARS],
                        )
                        raise ProviderCallFailed(
                            self.provider, response.status, "error status"
                        )
                    data = await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.error("OpenRouter request failed", error=str(e))
                raise ProviderCallFailed(self.provider, None, str(e)) from e

        return self._parse_completion(data)

    def _parse_completion(self, data: Any) -> str:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise ProviderCallFailed(self.provider, None, "no completion returned")
        try:
            content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderCallFailed(self.provider, None, "malformed completion") from e
        if not isinstance(content, str) or not content.strip():
            raise ProviderCallFailed(self.provider, None, "empty completion")
        return content


class StabilityImageClient:
    """Stable Diffusion client returning images as base64 data URIs."""

    provider = "stable_diffusion"

    def __init__(self, url: str, timeout: float | None = None):
        self.url = url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: ProviderSettings) -> "StabilityImageClient":
        return cls(
            url=settings.STABLE_DIFFUSION_URL,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
        )

    async def generate(self, api_key: str, prompt: str) -> str:
        form_data = aiohttp.FormData()
        form_data.add_field("prompt", prompt, content_type="text/plain")
        form_data.add_field("cfg_scale", str(IMAGE_CFG_SCALE))
        form_data.add_field("height", str(IMAGE_SIZE))
        form_data.add_field("width", str(IMAGE_SIZE))
        form_data.add_field("samples", str(IMAGE_SAMPLES))
        form_data.add_field("steps", str(IMAGE_STEPS))
        headers = {"Authorization": f"Bearer {api_key}", "Accept": "image/*"}

        async with aiohttp.ClientSession(timeout=_client_timeout(self.timeout)) as session:
            try:
                async with session.post(
                    self.url, data=form_data, headers=headers
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        logger.error(
                            "Stable Diffusion API error",
                            status=response.status,
                            body=error_text[:MAX_ERROR_BODY_CHARS],
                        )
                        raise ProviderCallFailed(
                            self.provider, response.status, "error status"
                        )
                    image_bytes = await response.read()
                    content_type = response.content_type
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error("Stable Diffusion request failed", error=str(e))
                raise ProviderCallFailed(self.provider, None, str(e)) from e

        if not image_bytes:
            raise ProviderCallFailed(self.provider, None, "empty image body")
        return to_data_uri(image_bytes, content_type)


def to_data_uri(image_bytes: bytes, content_type: str | None = None) -> str:
    if not content_type or not content_type.startswith("image/"):
        content_type = DEFAULT_IMAGE_CONTENT_TYPE
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"
