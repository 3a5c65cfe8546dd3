"""Configuration management for Unsubscribe Finder.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the UNSUB_FINDER_ prefix (e.g., UNSUB_FINDER_FETCH_CONCURRENCY).
    """

    model_config = SettingsConfigDict(
        env_prefix="UNSUB_FINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gmail Configuration
    gmail_user_id: str = Field(
        default="me",
        description="Gmail user id used for API calls on behalf of the signed-in user",
    )
    gmail_scope: str = Field(
        default="https://www.googleapis.com/auth/gmail.modify",
        description=(
            "OAuth scope used for Gmail access. Archiving threads needs gmail.modify; "
            "listing candidates alone works with gmail.readonly."
        ),
    )
    gmail_credentials_path: Path = Field(
        default=Path("credentials.json"),
        description="Path to the OAuth client secrets file (local CLI mode)",
    )
    gmail_token_path: Path = Field(
        default=Path("token.json"),
        description="Path to the cached OAuth token file (local CLI mode)",
    )

    # Candidate pipeline
    default_page_size: int = Field(
        default=50,
        ge=1,
        description="Number of search hits requested when the caller gives no limit",
    )
    max_page_size: int = Field(
        default=500,
        ge=1,
        description="Upper bound on the per-page limit (Gmail's own maximum)",
    )
    fetch_concurrency: int = Field(
        default=10,
        ge=1,
        description="Maximum number of message detail fetches in flight per request",
    )
    max_payload_depth: int = Field(
        default=50,
        ge=1,
        description="Deepest multipart nesting walked before a payload is rejected",
    )

    # Sessions and throttling
    session_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Lifetime of a signed-in session and its delegated credentials",
    )
    rate_limit_max_requests: int = Field(
        default=30,
        ge=1,
        description="Requests allowed per user within one rate-limit window",
    )
    rate_limit_window_seconds: int = Field(
        default=60,
        ge=1,
        description="Length of a rate-limit window in seconds",
    )

    # HTTP layer
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the API from a browser",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of the console format",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (includes upstream error details in API responses)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
