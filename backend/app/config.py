from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field, field_validator
from functools import lru_cache
from typing import List
from pathlib import Path

# Get the path to the .env file (in project root, one level up from backend)
ENV_FILE_PATH = Path(__file__).resolve().parent.parent.parent / ".env"


def needs_ssl(url: str) -> bool:
    """Return True when the raw database URL asks for SSL (sslmode=require)."""
    if "?" not in url:
        return False
    params = url.split("?", 1)[1].split("&")
    return any(p.startswith("sslmode=require") for p in params)


def clean_database_url(url: str) -> str:
    """Clean database URL for asyncpg compatibility.

    Hosted Postgres providers hand out URLs with sslmode/channel_binding params
    that asyncpg rejects. We strip them (SSL is configured on the engine instead)
    and make sure the asyncpg driver is selected.
    """
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)

    if "?" in url:
        base_url, params = url.split("?", 1)
        param_pairs = params.split("&")
        # Filter out unsupported params
        supported_params = [
            p for p in param_pairs
            if not p.startswith("sslmode=") and not p.startswith("channel_binding=")
        ]
        if supported_params:
            return base_url + "?" + "&".join(supported_params)
        return base_url
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - raw URL from environment
    database_url_raw: str = Field(
        default="postgresql+asyncpg://localhost:5432/reach",
        validation_alias="DATABASE_URL"
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """Return cleaned database URL for asyncpg."""
        return clean_database_url(self.database_url_raw)

    # Social analytics API (RapidAPI "community" lookup + TikTok info)
    rapidapi_key: str = Field(default="", validation_alias="RAPIDAPI_KEY")
    rapidapi_host: str = Field(
        default="instagram-statistics-api.p.rapidapi.com",
        validation_alias="RAPIDAPI_HOST"
    )
    social_api_timeout_seconds: float = Field(
        default=15.0,
        validation_alias="SOCIAL_API_TIMEOUT_SECONDS"
    )

    # Shared secret for the scheduled tier recomputation endpoint
    cron_secret: str = Field(default="", validation_alias="CRON_SECRET")

    # Web push (VAPID). Push is disabled when either key is missing.
    vapid_public_key: str = Field(default="", validation_alias="VAPID_PUBLIC_KEY")
    vapid_private_key: str = Field(default="", validation_alias="VAPID_PRIVATE_KEY")
    vapid_subject: str = Field(
        default="mailto:support@reachapp.com",
        validation_alias="VAPID_SUBJECT"
    )

    # App settings
    debug: bool = Field(default=False, validation_alias="DEBUG")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        validation_alias="CORS_ORIGINS"
    )

    @field_validator("rapidapi_key", "cron_secret", mode="before")
    @classmethod
    def strip_quotes(cls, value):
        """Env files sometimes carry the key wrapped in quotes; drop them."""
        if isinstance(value, str):
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
