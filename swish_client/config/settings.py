"""
Configuration Management for Swish Client

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Both remote services and every client-side tunable are declared in one
place and validated at startup.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UserServiceSettings(BaseSettings):
    """User service (login, registration, contacts, balance) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="USER_SERVICE_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the user service"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are appended with a leading slash."""
        return v.rstrip("/")


class TransactionServiceSettings(BaseSettings):
    """Transaction service (transfers, history, stats) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSACTION_SERVICE_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:3003",
        description="Base URL of the transaction service"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are appended with a leading slash."""
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Transport
    request_timeout_seconds: Optional[float] = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout; None waits indefinitely"
    )

    # Session persistence
    session_file: str = Field(
        default=".swish_session.json",
        description="File holding the persisted token and identity snapshot"
    )

    # Query defaults
    history_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of recent transactions to fetch"
    )
    between_limit: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of transactions to fetch between two users"
    )
    stats_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Window in days for transaction statistics"
    )
    currency: str = Field(
        default="SEK",
        min_length=3,
        max_length=3,
        description="Display currency for balances"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def user_service(self) -> UserServiceSettings:
        return UserServiceSettings()

    @property
    def transaction_service(self) -> TransactionServiceSettings:
        return TransactionServiceSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    {setting_name}_error entry for every section that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "user_service": lambda: settings.user_service,
        "transaction_service": lambda: settings.transaction_service,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
