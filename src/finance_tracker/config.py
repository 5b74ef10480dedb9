"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finance_tracker.domain.currency import CurrencyCode

class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with FT_) or .env file.

    Examples:
        FT_RATE_CACHE_PATH=/var/lib/finance_tracker/cache.db
        FT_RATE_CACHE_TTL_SECONDS=600
        FT_DEFAULT_CURRENCY=eur
        FT_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="FT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Finance Tracker"
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Exchange rates
    rate_provider_url: str = Field(
        default="https://api.frankfurter.app/latest",
        description="Latest-rates endpoint accepting from= and to= query parameters",
    )
    rate_cache_ttl_seconds: int = Field(
        default=3600, ge=1, description="Age after which cached rates are discarded"
    )
    rate_cache_path: Path = Field(
        default=Path("finance_tracker_cache.db"),
        description="SQLite file holding the exchange rate cache (':memory:' allowed)",
    )
    http_timeout: float | None = Field(
        default=5.0, description="Transport timeout in seconds; None disables it"
    )
    default_currency: CurrencyCode = Field(
        default=CurrencyCode.USD,
        description="Display currency used when the profile has no preference",
    )

    # Hosted backend
    backend_url: str | None = Field(
        default=None, description="Base URL of the hosted REST backend"
    )
    backend_api_key: str | None = Field(
        default=None, description="Public API key sent with every backend request"
    )

    @field_validator("default_currency", mode="before")
    @classmethod
    def normalize_default_currency(cls, v: object) -> object:
        """Accept lowercase currency codes from the environment."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def rate_cache_ttl_ms(self) -> int:
        """Cache time-to-live in milliseconds, matching cached timestamps."""
        return self.rate_cache_ttl_seconds * 1000

    @property
    def backend_configured(self) -> bool:
        """Check whether the hosted backend can be reached."""
        return bool(self.backend_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
