from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    JWT_SECRET: str = ""
    JWT_EXPIRE_DAYS: int = 7

    def validate_secret(self) -> None:
        """Raise when no JWT signing secret is configured."""
        if not self.JWT_SECRET.strip():
            raise ValueError("JWT_SECRET must be set")
