"""
Application configuration module.
Uses Pydantic's BaseSettings for type-safe configuration with environment variable support.
"""

import sys

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    These are loaded from environment variables and validated by Pydantic.
    Environment variables take precedence over the default values specified here.
    """
    BOT_TOKEN: str = Field(..., min_length=1)  # No default - must be set
    DB_URL: str = Field("sqlite+aiosqlite:///bookswap.db", validation_alias="DATABASE_URL")
    REDIS_URL: str = ""

    USE_WEBHOOK: bool = False
    WEBHOOK_HOST: str = ""
    WEBHOOK_PATH: str = "/webhook"
    BOT_PORT: int = 8081

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Conversation and matching limits
    MAX_BOOKS: int = 3
    BROWSE_TIMEOUT_SECONDS: int = 300
    SESSION_TTL_SECONDS: int = 1800
    RATE_LIMIT_PER_MINUTE: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        populate_by_name=True,
        # Allow extra fields in case we add more later without updating the model
        extra="ignore",
    )

    @field_validator("DB_URL")
    @classmethod
    def use_async_driver(cls, url: str) -> str:
        """Rewrite Heroku/Railway style postgres URLs to the asyncpg dialect."""
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


# Cache the settings instance
_settings = None


def get_settings() -> Settings:
    """
    Get the settings instance.

    Returns:
        Settings: The settings instance.
    """
    global _settings
    if _settings is None:
        try:
            _settings = Settings()
        except ValidationError as e:
            # Handle missing environment variables
            if "BOT_TOKEN" in str(e):
                print(f"Error: BOT_TOKEN environment variable is not set. {e}")
                print("Please set the BOT_TOKEN environment variable and restart the application.")
                sys.exit(1)
            raise
    return _settings
