"""Application configuration for the kost search API."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "kosan.json"


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.0-flash")
    gemini_model_fallbacks: list[str] = Field(default_factory=lambda: [
        "gemini-2.0-flash-lite",
        "gemini-1.5-flash-latest",
    ])
    gemini_timeout_seconds: float = Field(default=60.0, gt=0)

    mamikos_api_key: str = Field(default="")
    olx_api_key: str = Field(default="")
    rumah123_api_key: str = Field(default="")
    travelio_api_key: str = Field(default="")
    mamitroom_api_key: str = Field(default="")
    provider_timeout_seconds: float = Field(default=30.0, gt=0)

    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=512, ge=1)

    google_api_key: str = Field(default="")
    custom_search_engine_id: str = Field(default="")
    web_search_timeout_seconds: float = Field(default=15.0, gt=0)

    search_result_limit: int = Field(default=20, ge=1)
    kost_data_path: Path = Field(default=DEFAULT_DATA_PATH)

    @field_validator("gemini_model_fallbacks", "cors_allow_origins", mode="before")
    @classmethod
    def _split_csv(cls, value: object) -> object:
        """Allow comma-separated env values for list settings."""

        if isinstance(value, str):
            parts = [item.strip() for item in value.split(",") if item.strip()]
            return parts
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
