"""Configuration management using Pydantic Settings."""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from fastapi_blogx.retry import RetryPolicy


class Settings(BaseSettings):
    """Settings loaded from environment variables and an optional ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Notion
    notion_token: str | None = None
    blog_index_id: str | None = Field(
        default=None, description="Notion database holding the blog posts"
    )
    notion_api_url: str = "https://api.notion.com"
    notion_version: str = "2022-06-28"
    notion_timeout: float = 30.0

    # Environment
    app_env: Literal["development", "production", "test"] = "development"
    build_phase: bool = Field(
        default=False,
        description="Set while pre-rendering; every remote failure falls back",
    )

    # Cache TTLs in seconds
    blog_posts_ttl: float = 600
    blog_post_ttl: float = 7200

    # Request queue
    queue_min_interval: float = 0.2

    # Retry
    retry_max_retries: int = 6
    retry_base_delay: float = 2.0
    retry_max_delay: float = 45.0
    retry_backoff_factor: float = 2.5
    retry_jitter_ratio: float = 0.5

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def notion_configured(self) -> bool:
        return bool(self.notion_token and self.blog_index_id)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def fallback_always(self) -> bool:
        """Production runs and builds treat every remote failure as an outage."""
        return self.is_production or self.build_phase

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.retry_max_retries,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
            backoff_factor=self.retry_backoff_factor,
            jitter_ratio=self.retry_jitter_ratio,
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


def configure_logging(settings: Settings) -> None:
    """Apply the configured level to the package logger."""
    logging.getLogger("fastapi_blogx").setLevel(settings.log_level)
