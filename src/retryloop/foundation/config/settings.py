"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from retryloop.foundation.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.retry.max_retries)
    10
    >>> print(settings.logging.level)
    'INFO'

    # Or with environment variables:
    # RETRYLOOP_RETRY_MAX_RETRIES=5
    # RETRYLOOP_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeInt, PositiveFloat, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Whole seconds that still fit in a timedelta
_MAX_SECONDS = timedelta.max // timedelta(seconds=1)


class RetrySettings(BaseSettings):
    """Defaults for the built-in backoff policy."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYLOOP_RETRY_",
        extra="ignore",
    )

    max_retries: NonNegativeInt = Field(default=10, description="Retries granted by default_backoff")
    default_delay: PositiveFloat = Field(default=0.05, le=_MAX_SECONDS, description="Base delay in seconds")
    max_delay: PositiveFloat = Field(default=10.0, le=_MAX_SECONDS, description="Cap on a policy-supplied base delay")

    @computed_field
    @property
    def default_delay_td(self) -> timedelta:
        return timedelta(seconds=self.default_delay)

    @computed_field
    @property
    def max_delay_td(self) -> timedelta:
        return timedelta(seconds=self.max_delay)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYLOOP_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


class RetryloopSettings(BaseSettings):
    """Root settings, loaded from RETRYLOOP_* environment variables.

    Example environment variables:
        RETRYLOOP_RETRY_MAX_RETRIES=3
        RETRYLOOP_RETRY_DEFAULT_DELAY=0.25
        RETRYLOOP_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYLOOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetryloopSettings:
    """Get the global settings instance (cached)."""
    return RetryloopSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
