"""
Runtime configuration for the training plan mapper.

Every value comes from the environment (or a local .env file) and is
validated by pydantic-settings. Routers receive settings through
get_settings(), which api.deps re-exports as a FastAPI dependency:

    @router.get("/health/ready")
    def readiness(settings: Settings = Depends(get_settings)):
        return {"destination_configured": settings.planmypeak_configured}

Tests construct Settings(..., _env_file=None) directly or call
get_settings.cache_clear() after changing the environment.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )

    # -------------------------------------------------------------------------
    # Destination - PlanMyPeak
    # -------------------------------------------------------------------------
    planmypeak_api_url: str = Field(
        default="https://app.planmypeak.com/api",
        description="Base URL of the PlanMyPeak API",
    )
    planmypeak_api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for PlanMyPeak API calls",
    )
    remote_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single destination request",
    )
    remote_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for destination connect errors and timeouts",
    )

    # -------------------------------------------------------------------------
    # Destination - Intervals.icu
    # -------------------------------------------------------------------------
    intervals_api_url: str = Field(
        default="https://intervals.icu/api/v1",
        description="Base URL of the Intervals.icu API",
    )
    intervals_api_key: Optional[str] = Field(
        default=None,
        description="Athlete API key for Intervals.icu library exports",
    )

    # -------------------------------------------------------------------------
    # Export runs
    # -------------------------------------------------------------------------
    export_max_runs: int = Field(
        default=100,
        ge=1,
        description="Export runs kept in memory before finished ones are evicted",
    )

    # -------------------------------------------------------------------------
    # Source
    # -------------------------------------------------------------------------
    source_platform_tag: str = Field(
        default="TP",
        min_length=1,
        description="Prefix of workout identities derived from source structures",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("source_platform_tag")
    @classmethod
    def validate_source_platform_tag(cls, v: str) -> str:
        if ":" in v:
            raise ValueError("source_platform_tag must not contain ':'")
        return v

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def planmypeak_configured(self) -> bool:
        """True when a PlanMyPeak token is available."""
        return bool(self.planmypeak_api_token)

    @property
    def intervals_configured(self) -> bool:
        return bool(self.intervals_api_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
