"""
Configuration Management Module

This module handles all application configuration using Pydantic Settings.
Configuration is loaded from environment variables with strong typing and validation.

Design Decisions:
- Use Pydantic Settings for automatic environment variable loading
- Every setting has a default so fixtures can be served with no configuration
- Validate configuration at startup (fail-fast approach)
- The webhook secret is only needed when re-signing replayed deliveries
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The webhook secret is loaded from the environment only,
    never hardcoded or logged.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # =========================================================================
    # Replay Configuration
    # =========================================================================
    replay_target_url: Optional[str] = Field(
        default=None,
        description="Default webhook receiver URL for replayed deliveries"
    )

    webhook_secret: Optional[str] = Field(
        default=None,
        description="Webhook secret used to re-sign replayed deliveries"
    )

    replay_timeout: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Per-request timeout in seconds"
    )

    replay_rate_limit_rpm: int = Field(
        default=600,
        ge=1,
        description="Maximum replayed deliveries per minute"
    )

    max_replay_count: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum number of sends for a single replay request"
    )

    response_body_limit: int = Field(
        default=2048,
        ge=0,
        description="Bytes of receiver response body kept in replay results"
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind the server"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port to bind the server"
    )

    # =========================================================================
    # Logging Configuration
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    log_json_format: bool = Field(
        default=True,
        description="Enable JSON logging format"
    )

    log_requests: bool = Field(
        default=False,
        description="Enable request/response logging"
    )

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("replay_target_url")
    @classmethod
    def validate_target_url(cls, v: Optional[str]) -> Optional[str]:
        """Only http(s) receivers can be replayed to."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid replay target URL: {v}. Must be http(s)")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def can_resign(self) -> bool:
        """Whether a secret is configured for re-signing deliveries."""
        return bool(self.webhook_secret)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once,
    which is important for performance and consistency.

    Returns:
        Settings instance
    """
    return Settings()
