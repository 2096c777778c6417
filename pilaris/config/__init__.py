"""Configuration package."""

from pilaris.config.settings import (
    DefaultsSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DefaultsSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
