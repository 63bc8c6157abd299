"""
Configuration Management for LifeLedger

Uses pydantic-settings for type-safe configuration from environment variables.

All tunables live here: where data is written, how storage keys are
namespaced, and the thresholds the statistics engine and the transaction
editor apply. Every setting can be overridden with a ``LIFELEDGER_`` prefixed
environment variable or a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIFELEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_name: str = Field(
        default="lifeledger",
        min_length=1,
        description="Application name, used in backup file names"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    # Storage
    data_dir: Path = Field(
        default=Path.home() / ".lifeledger",
        description="Directory holding the JSON data files"
    )
    key_prefix: str = Field(
        default="lifeledger",
        min_length=1,
        description="Namespace prefix for storage keys"
    )
    key_version: str = Field(
        default="v2",
        min_length=1,
        description="Schema version suffix for storage keys"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed file write is attempted"
    )

    # Statistics
    budget_warning_ratio: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Share of a budget spent before the warning state fires"
    )
    trend_days: int = Field(
        default=7,
        ge=1,
        le=366,
        description="Length of the trailing trend window in days"
    )
    unknown_label: str = Field(
        default="unknown",
        description="Label used for deleted categories and tags"
    )

    # Transaction editor
    note_max_length: int = Field(
        default=50,
        ge=1,
        description="Maximum length of a transaction note"
    )
    strict_category_kind: bool = Field(
        default=True,
        description="Reject transactions whose category kind differs from their own"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Expand ``~`` so the path can be used directly."""
        return v.expanduser()

    def storage_key(self, collection: str) -> str:
        """Build the namespaced key for a stored collection."""
        return f"{self.key_prefix}_{collection}_{self.key_version}"


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()


def validate_settings() -> dict[str, bool]:
    """
    Check that the configured data directory is usable.

    Returns a dict of {setting_name: is_valid}, with an ``*_error`` entry
    describing each failure. Useful for startup checks.
    """
    results = {}

    try:
        settings = get_settings()
        results["settings"] = True
    except Exception as e:
        results["settings"] = False
        results["settings_error"] = str(e)
        return results

    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        probe = settings.data_dir / ".write_probe"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink()
        results["data_dir"] = True
    except OSError as e:
        results["data_dir"] = False
        results["data_dir_error"] = str(e)

    return results
