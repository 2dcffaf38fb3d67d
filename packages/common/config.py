from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_SECRETS = {"your-secret-key", "secret", "changeme", "change-me"}


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env.

    Notes:
        - `JWT_SECRET` has no default; the application fails fast if it is missing.
        - Telegram delivery is disabled unless `TELEGRAM_BOT_TOKEN` is set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        protected_namespaces=()
    )

    ENV: str = Field(default="dev", description="Deployment environment, e.g. dev/staging/prod")
    SERVICE_NAME: str = Field(default="test-platform", description="Service name")
    PORT: int = Field(default=3000, description="HTTP listen port")
    API_PREFIX: str = Field(default="/api", description="Path prefix for all API routes")
    FRONTEND_ORIGINS: str = Field(default="*", description="Comma-separated CORS origins")
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")
    APP_LANG: Literal["uz", "en"] = Field(default="uz", description="Language of client-facing messages")

    DATA_DIR: Path = Field(default=Path("data"), description="Directory holding the JSON collections")

    JWT_SECRET: str = Field(..., description="HMAC secret for bearer tokens (must be provided)")
    JWT_TTL_HOURS: int = Field(default=24, description="Bearer token lifetime in hours")
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31, description="bcrypt cost factor for password hashes")

    VERIFICATION_TTL_SECONDS: int = Field(default=300, description="Verification code lifetime")

    TELEGRAM_BOT_TOKEN: str | None = Field(default=None, description="Bot token; delivery disabled when unset")
    TELEGRAM_API_URL: str = Field(default="https://api.telegram.org", description="Bot API base URL")
    TELEGRAM_WEBHOOK_SECRET: str | None = Field(default=None, description="Expected X-Telegram-Bot-Api-Secret-Token")
    TELEGRAM_TIMEOUT_SECONDS: float = Field(default=5.0, description="Timeout for a single sendMessage call")

    @model_validator(mode="after")
    def _no_weak_secret(self) -> "Settings":
        if not self.JWT_SECRET.strip():
            raise ValueError("JWT_SECRET must be set and non-empty.")
        if self.ENV == "prod" and self.JWT_SECRET.strip().lower() in _PLACEHOLDER_SECRETS:
            raise ValueError("JWT_SECRET is a known placeholder; refusing to start in prod.")
        return self

    @property
    def allow_origins(self) -> list[str]:
        return [o.strip() for o in self.FRONTEND_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance."""
    return Settings()
