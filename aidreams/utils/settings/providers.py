"""AI provider settings configuration."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from aidreams.database.models import ProviderType


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Environment-level keys, used only when the community pool is empty
    OPENROUTER_API_KEY: SecretStr | None = None
    STABLE_DIFFUSION_API_KEY: SecretStr | None = None

    OPENROUTER_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_MODEL: str = "mistralai/mistral-7b-instruct:free"
    OPENROUTER_REFERER: str = "https://aidreams.app"
    OPENROUTER_TITLE: str = "AIDreams"

    STABLE_DIFFUSION_URL: str = (
        "https://api.stability.ai/v2beta/stable-image/generate/core"
    )

    # None waits for the provider however long it takes
    GENERATION_TIMEOUT_SECONDS: float | None = None

    def static_keys(self) -> dict[ProviderType, str]:
        """Configured environment keys by provider type."""
        keys: dict[ProviderType, str] = {}
        if self.OPENROUTER_API_KEY and self.OPENROUTER_API_KEY.get_secret_value():
            keys[ProviderType.TEXT_GENERATION] = (
                self.OPENROUTER_API_KEY.get_secret_value()
            )
        if (
            self.STABLE_DIFFUSION_API_KEY
            and self.STABLE_DIFFUSION_API_KEY.get_secret_value()
        ):
            keys[ProviderType.IMAGE_GENERATION] = (
                self.STABLE_DIFFUSION_API_KEY.get_secret_value()
            )
        return keys
