"""
Configuration Management for Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every section has a working default, so the ledger starts
without any .env file at all.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = [
    "Food",
    "Transport",
    "Housing",
    "Utilities",
    "Health",
    "Entertainment",
    "Other",
]


class StorageSettings(BaseSettings):
    """Durable slot configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(memory|file)$",
        description="Which persistence adapter to use"
    )
    data_dir: Path = Field(
        default=Path(".ledger"),
        description="Directory holding the JSON slot files (file backend)"
    )
    key: str = Field(
        default="expense_tracker_items_v1",
        min_length=1,
        description="Key of the slot holding the whole collection"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a slot write before the error propagates"
    )


class LoggingSettings(BaseSettings):
    """structlog output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines instead of console output"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Only accept stdlib level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    default_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        description="Categories the registry is seeded with"
    )
    fallback_category: str = Field(
        default="Other",
        min_length=1,
        description="Category used when an entry has none"
    )

    export_filename: str = Field(
        default="expenses.json",
        min_length=1,
        description="File name offered for exports"
    )
    export_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="JSON indentation used for exports"
    )

    @field_validator('default_categories')
    @classmethod
    def drop_blank_categories(cls, v: list[str]) -> list[str]:
        """Strip labels and drop empty ones."""
        return [label.strip() for label in v if label and label.strip()]


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

    # Loaded lazily so a broken section only fails where it is used

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    "<name>_error" entries for sections that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "logging", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
