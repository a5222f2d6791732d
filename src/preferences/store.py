"""JSON-file key-value store for user settings."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from .settings import (
    DEFAULT_SETTINGS,
    KEY_BREAK_TIME,
    KEY_CAT_THEME,
    KEY_LONG_BREAK_TIME,
    KEY_PET_TYPE,
    KEY_SESSIONS_BEFORE_LONG_BREAK,
    KEY_WORK_TIME,
    SETTING_KEYS,
    InvalidConfigValue,
    PreferencesError,
    SettingsLoadFailure,
    TimerSettings,
    validate_value,
)


class JsonPreferencesStore:
    """Durable get/set store backed by a single JSON object on disk."""

    def __init__(self, path: str | Path, logger: Optional[logging.Logger] = None):
        self._path = Path(path)
        self._logger = logger or logging.getLogger("preferences")

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        try:
            data = self._read()
        except SettingsLoadFailure as error:
            self._logger.warning("%s; using default for %s", error, key)
            return default
        return data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: Mapping[str, Any]) -> None:
        try:
            data = self._read()
        except SettingsLoadFailure as error:
            self._logger.warning("%s; rewriting settings file", error)
            data = {}
        data.update(values)
        self._write(data)

    def load_settings(self) -> TimerSettings:
        """Load settings, falling back to defaults for anything unreadable."""
        try:
            data = self._read()
        except SettingsLoadFailure as error:
            self._logger.warning("%s; using default settings", error)
            return TimerSettings()

        values: dict[str, Any] = {}
        for key in SETTING_KEYS:
            raw = data.get(key, DEFAULT_SETTINGS[key])
            try:
                values[key] = validate_value(key, raw)
            except InvalidConfigValue as error:
                self._logger.warning(
                    "Ignoring stored %s (%s); using default %r",
                    key,
                    error,
                    DEFAULT_SETTINGS[key],
                )
                values[key] = DEFAULT_SETTINGS[key]

        return TimerSettings(
            work_minutes=values[KEY_WORK_TIME],
            break_minutes=values[KEY_BREAK_TIME],
            long_break_minutes=values[KEY_LONG_BREAK_TIME],
            sessions_before_long_break=values[KEY_SESSIONS_BEFORE_LONG_BREAK],
            theme=values[KEY_CAT_THEME],
            pet_type=values[KEY_PET_TYPE],
        )

    def save_settings(self, settings: TimerSettings) -> None:
        self.update(settings.to_store())
        self._logger.info("Settings saved to %s", self._path)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
            raise SettingsLoadFailure(
                f"Failed to read settings file {self._path}: {error}"
            ) from error

        if not isinstance(data, dict):
            raise SettingsLoadFailure(
                f"Settings file {self._path} must contain a JSON object"
            )
        return data

    def _write(self, data: Mapping[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            dir=str(self._path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(dict(data), fh, indent=2, sort_keys=True)
                fh.write("\n")
            os.replace(temp_name, self._path)
        except OSError as error:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(temp_name)
            raise PreferencesError(
                f"Failed to write settings file {self._path}: {error}"
            ) from error
