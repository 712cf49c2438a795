"""Configuration package."""

from swish_client.config.settings import (
    AppSettings,
    Settings,
    TransactionServiceSettings,
    UserServiceSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "TransactionServiceSettings",
    "UserServiceSettings",
    "get_settings",
    "validate_all_settings",
]
