"""
Configuration Management for Pilaris

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: where records are persisted and
which defaults a brand-new day or a brand-new installation starts from.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TIME_SLOTS = ",".join(f"{hour:02d}:00" for hour in range(6, 21))


class StorageSettings(BaseSettings):
    """Key/value medium configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PILARIS_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json_file",
        pattern="^(memory|json_file)$",
        description="Which medium backs the record store"
    )
    file_path: str = Field(
        default="pilaris_data.json",
        description="Path of the JSON file used by the json_file backend"
    )

    @field_validator('file_path')
    @classmethod
    def validate_file_path(cls, v: str) -> str:
        """Warn if the parent directory doesn't exist (it is created on first write)."""
        parent = Path(v).expanduser().parent
        if not parent.exists():
            import warnings
            warnings.warn(
                f"Directory {parent} does not exist yet. "
                "It will be created on the first write."
            )
        return v


class DefaultsSettings(BaseSettings):
    """
    Defaults materialized when nothing is stored yet.

    List-valued options are comma-separated strings so they can be set
    from a single environment variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="PILARIS_DEFAULTS_",
        extra="ignore"
    )

    service_name: str = Field(
        default="Pilates",
        min_length=1,
        description="Name of the service created with a fresh catalog"
    )
    service_price: float = Field(
        default=25.0,
        ge=0.0,
        description="Unit price of the default service"
    )
    student_tags: str = Field(
        default="Estúdio,Wellhub,Gympass",
        description="Comma-separated list of default student tags"
    )
    time_slots: str = Field(
        default=DEFAULT_TIME_SLOTS,
        description="Comma-separated list of time labels of a day's schedule"
    )
    students_per_slot: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Blank students created in each slot of a new day"
    )

    @property
    def student_tags_list(self) -> list[str]:
        """Get default tags as a list, without blanks or repeats."""
        tags: list[str] = []
        for tag in self.student_tags.split(","):
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @property
    def time_slots_list(self) -> list[str]:
        """Get time labels as a list."""
        return [slot.strip() for slot in self.time_slots.split(",") if slot.strip()]


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def defaults(self) -> DefaultsSettings:
        return DefaultsSettings()


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

    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        defaults = settings.defaults
        if not defaults.time_slots_list:
            raise ValueError("At least one time slot must be configured")
        results["defaults"] = True
    except Exception as e:
        results["defaults"] = False
        results["defaults_error"] = str(e)

    return results
