"""
Configuration module for the turnip sync client.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
Remote access codes are issued per endpoint by the backend and are kept here so
that request code never hard-codes them.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the sync client.

    Attributes:
        BASE_URL: Base URL of the remote functions host
        CACHE_DATABASE_URL: SQLAlchemy URL of the local cache database
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Render logs as JSON instead of console output
        REQUEST_TIMEOUT: HTTP timeout in seconds, None waits for the transport
        PROFILE_TTL_DAYS: Lifetime of the cached local profile
        WEEK_TTL_DAYS: Lifetime of the cached weekly prices
        SOCIAL_TTL_MINUTES: Lifetime of cached friend lists
    """

    BASE_URL: str = Field(
        default="http://localhost:7071",
        description="Base URL of the remote functions host",
    )
    CACHE_DATABASE_URL: str = Field(
        default="sqlite:///turnip_cache.db",
        description="SQLAlchemy URL for the local cache database",
    )

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit structured JSON logs",
    )

    # HTTP client configuration
    REQUEST_TIMEOUT: Optional[float] = Field(
        default=None,
        gt=0,
        description="Timeout for HTTP requests in seconds (None disables it)",
    )

    # Per-endpoint function access codes
    CREATE_PROFILE_CODE: str = ""
    UPDATE_PROFILE_CODE: str = ""
    UPDATE_TURNIP_PRICES_CODE: str = ""
    SUBMIT_FRIEND_REQUEST_CODE: str = ""
    REJECT_FRIEND_REQUEST_CODE: str = ""
    APPROVE_FRIEND_REQUEST_CODE: str = ""
    REMOVE_FRIEND_CODE: str = ""
    GET_FRIENDS_CODE: str = ""
    GET_FRIEND_REQUESTS_CODE: str = ""

    # Cache lifetimes
    PROFILE_TTL_DAYS: int = Field(default=1, ge=1)
    WEEK_TTL_DAYS: int = Field(default=7, ge=1)
    SOCIAL_TTL_MINUTES: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("BASE_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """
        Validate that the base URL is properly formatted.

        Args:
            value: The URL to validate

        Returns:
            The validated URL without trailing slash

        Raises:
            ValueError: If URL is invalid
        """
        if not value:
            raise ValueError("Base URL cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(f"Base URL must start with http:// or https://, got: {value}")

        return value


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
