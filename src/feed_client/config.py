"""Configuration for the feed client."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Feed client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_url: str = Field(default="http://localhost:8000", validation_alias="PROMPTS_API_URL")
    api_timeout: float = Field(default=30.0, validation_alias="PROMPTS_API_TIMEOUT")
    page_size: int = Field(default=12, validation_alias="PROMPTS_PAGE_SIZE")


@lru_cache
def get_client_settings() -> ClientSettings:
    """Get cached client settings instance."""
    return ClientSettings()
