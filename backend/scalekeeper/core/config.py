"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = Field("ScaleKeeper API", alias="APP_NAME")
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")

    database_url: str = Field(
        "sqlite+aiosqlite:///./scalekeeper.db", alias="DATABASE_URL"
    )
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    timezone: str = Field("UTC", alias="APP_TIMEZONE")
    default_feeding_interval_days: int = Field(
        7, ge=1, alias="DEFAULT_FEEDING_INTERVAL_DAYS"
    )
    open_ended_dose_horizon_days: int = Field(
        14, ge=1, alias="OPEN_ENDED_DOSE_HORIZON_DAYS"
    )
    reminder_retry_attempts: int = Field(3, ge=1, alias="REMINDER_RETRY_ATTEMPTS")

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
