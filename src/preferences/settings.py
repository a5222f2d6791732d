"""Minute-based user settings, their store keys, and input validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pomodoro.constants import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_PET_TYPE,
    DEFAULT_SESSIONS_BEFORE_LONG_BREAK,
    DEFAULT_THEME,
    DEFAULT_WORK_MINUTES,
    PET_TYPES,
)

KEY_WORK_TIME = "workTime"
KEY_BREAK_TIME = "breakTime"
KEY_LONG_BREAK_TIME = "longBreakTime"
KEY_SESSIONS_BEFORE_LONG_BREAK = "sessionsBeforeLongBreak"
KEY_CAT_THEME = "catTheme"
KEY_PET_TYPE = "petType"

SETTING_KEYS: tuple[str, ...] = (
    KEY_WORK_TIME,
    KEY_BREAK_TIME,
    KEY_LONG_BREAK_TIME,
    KEY_SESSIONS_BEFORE_LONG_BREAK,
    KEY_CAT_THEME,
    KEY_PET_TYPE,
)

DEFAULT_SETTINGS: dict[str, Any] = {
    KEY_WORK_TIME: DEFAULT_WORK_MINUTES,
    KEY_BREAK_TIME: DEFAULT_BREAK_MINUTES,
    KEY_LONG_BREAK_TIME: DEFAULT_LONG_BREAK_MINUTES,
    KEY_SESSIONS_BEFORE_LONG_BREAK: DEFAULT_SESSIONS_BEFORE_LONG_BREAK,
    KEY_CAT_THEME: DEFAULT_THEME,
    KEY_PET_TYPE: DEFAULT_PET_TYPE,
}


class PreferencesError(Exception):
    """Base exception for persisted user settings."""


class InvalidConfigValue(PreferencesError):
    """Raised when a settings value is rejected at the input boundary."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


class SettingsLoadFailure(PreferencesError):
    """Raised when the settings file cannot be read or parsed."""


@dataclass(frozen=True)
class TimerSettings:
    """User settings as stored: durations in whole minutes."""
    work_minutes: int = DEFAULT_WORK_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    sessions_before_long_break: int = DEFAULT_SESSIONS_BEFORE_LONG_BREAK
    theme: str = DEFAULT_THEME
    pet_type: str = DEFAULT_PET_TYPE

    def to_store(self) -> dict[str, Any]:
        return {
            KEY_WORK_TIME: self.work_minutes,
            KEY_BREAK_TIME: self.break_minutes,
            KEY_LONG_BREAK_TIME: self.long_break_minutes,
            KEY_SESSIONS_BEFORE_LONG_BREAK: self.sessions_before_long_break,
            KEY_CAT_THEME: self.theme,
            KEY_PET_TYPE: self.pet_type,
        }


def validate_settings(
    raw: Mapping[str, Any],
    *,
    base: Optional[TimerSettings] = None,
) -> TimerSettings:
    """Validate store-keyed values and merge them over `base`.

    Keys absent from `raw` keep their `base` value. Unknown keys are
    rejected so a typo in a settings form never silently does nothing.
    """
    unknown = sorted(key for key in raw if key not in SETTING_KEYS)
    if unknown:
        raise InvalidConfigValue(unknown[0], "unknown setting")

    merged = {**(base or TimerSettings()).to_store(), **raw}
    return TimerSettings(
        work_minutes=validate_value(KEY_WORK_TIME, merged[KEY_WORK_TIME]),
        break_minutes=validate_value(KEY_BREAK_TIME, merged[KEY_BREAK_TIME]),
        long_break_minutes=validate_value(
            KEY_LONG_BREAK_TIME,
            merged[KEY_LONG_BREAK_TIME],
        ),
        sessions_before_long_break=validate_value(
            KEY_SESSIONS_BEFORE_LONG_BREAK,
            merged[KEY_SESSIONS_BEFORE_LONG_BREAK],
        ),
        theme=validate_value(KEY_CAT_THEME, merged[KEY_CAT_THEME]),
        pet_type=validate_value(KEY_PET_TYPE, merged[KEY_PET_TYPE]),
    )


def validate_value(key: str, value: Any) -> Any:
    if key in (
        KEY_WORK_TIME,
        KEY_BREAK_TIME,
        KEY_LONG_BREAK_TIME,
        KEY_SESSIONS_BEFORE_LONG_BREAK,
    ):
        return _as_positive_int(key, value)
    if key == KEY_CAT_THEME:
        if not isinstance(value, str) or not value.strip():
            raise InvalidConfigValue(key, "must be a non-empty string")
        return value.strip()
    if key == KEY_PET_TYPE:
        if not isinstance(value, str) or value.strip().lower() not in PET_TYPES:
            allowed = ", ".join(PET_TYPES)
            raise InvalidConfigValue(key, f"must be one of: {allowed}")
        return value.strip().lower()
    raise InvalidConfigValue(key, "unknown setting")


def _as_positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidConfigValue(key, "must be a whole number")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError as error:
            raise InvalidConfigValue(key, f"must be a whole number, got {value!r}") from error
    else:
        raise InvalidConfigValue(key, f"must be a whole number, got {value!r}")

    if number <= 0:
        raise InvalidConfigValue(key, f"must be greater than zero, got {number}")
    return number
