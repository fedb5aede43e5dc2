"""Configuration package."""

from src.config.settings import (
    AppSettings,
    DatabaseSettings,
    SecuritySettings,
    Settings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "SecuritySettings",
    "Settings",
    "get_settings",
]
