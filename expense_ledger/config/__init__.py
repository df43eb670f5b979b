"""Configuration package."""

from expense_ledger.config.settings import (
    DEFAULT_CATEGORIES,
    AppSettings,
    LoggingSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "AppSettings",
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
