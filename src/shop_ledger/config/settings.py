"""Configuration settings for the shop ledger."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote store
    store_url: str = Field(
        default="http://localhost:54321", validation_alias="SHOP_STORE_URL"
    )
    store_api_key: SecretStr = Field(..., validation_alias="SHOP_STORE_API_KEY")
    store_timeout: float = Field(default=30.0, validation_alias="SHOP_STORE_TIMEOUT")
    store_max_retries: int = Field(default=3, validation_alias="SHOP_STORE_MAX_RETRIES")

    # Classification keywords (YAML); built-in defaults when unset
    keywords_file: str | None = Field(
        default=None, validation_alias="SHOP_LEDGER_KEYWORDS_FILE"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
