"""Configuration module for animelog."""

from .settings import (
    BackfillSettings,
    JikanSettings,
    ObservabilitySettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "BackfillSettings",
    "JikanSettings",
    "ObservabilitySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
