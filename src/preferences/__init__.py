from .settings import (
    DEFAULT_SETTINGS,
    InvalidConfigValue,
    PreferencesError,
    SettingsLoadFailure,
    TimerSettings,
    validate_settings,
)
from .store import JsonPreferencesStore

__all__ = [
    "DEFAULT_SETTINGS",
    "InvalidConfigValue",
    "JsonPreferencesStore",
    "PreferencesError",
    "SettingsLoadFailure",
    "TimerSettings",
    "validate_settings",
]
