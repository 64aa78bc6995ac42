"""Application configuration via pydantic-settings.

Secrets and endpoints are loaded from environment variables (.env file).
Settings are organized into logical groups and composed into a single Settings object.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """REST API the activity log is fetched from."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    activity_api_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the project-management REST API",
    )
    activity_api_token: str = Field(default="", description="Bearer token for the signed-in viewer")
    activity_api_timeout: float = Field(default=10.0, description="Request timeout in seconds")
    activity_api_connect_timeout: float = Field(default=5.0, description="Connect timeout in seconds")


class FeedSettings(BaseSettings):
    """Activity feed paging and rendering knobs."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    feed_page_size: int = Field(default=20, description="Initial limit and load-more increment")
    feed_debounce_seconds: float = Field(
        default=0.1,
        description="Delay used to coalesce rapid filter toggles into one fetch",
    )
    feed_truncate_length: int = Field(default=40, description="Max characters shown per long text value")
    display_timezone: str = Field(default="UTC", description="IANA timezone used to render dates")


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.api.activity_api_url
        settings.feed.feed_page_size
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Composed settings (loaded from same .env)
    api: ApiSettings = Field(default_factory=ApiSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Module-level singleton, import this wherever settings are needed.
settings = Settings()
