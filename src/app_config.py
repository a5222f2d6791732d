from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore


DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_PREFERENCES_FILE = "preferences.json"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class OverlayServerSettings:
    """Overlay channel settings from `[overlay_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8766
    path: str = "/overlay"


@dataclass(frozen=True)
class PreferencesSettings:
    """Location of the persisted user settings from `[preferences]`."""
    file: str = DEFAULT_PREFERENCES_FILE


@dataclass(frozen=True)
class LoggingSettings:
    """Root log level from `[logging]`."""
    level: str = "INFO"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    overlay_server: OverlayServerSettings
    preferences: PreferencesSettings
    logging: LoggingSettings
    source_file: str


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv("APP_CONFIG_FILE")
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    if path.exists():
        return path

    # Packaged fallback: use bundled config.toml when no explicit path is provided.
    if config_path is None and env_path is None:
        bundle_root = Path(getattr(sys, "_MEIPASS", ""))
        if str(bundle_root):
            bundled_path = bundle_root / DEFAULT_CONFIG_FILE
            if bundled_path.exists():
                return bundled_path

    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise AppConfigurationError(f"Config file not found: {path}")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    base_dir = path.parent

    overlay_raw = _section(raw, "overlay_server")
    overlay_server = OverlayServerSettings(
        enabled=_as_bool(overlay_raw.get("enabled", True), "overlay_server.enabled"),
        host=_as_str(overlay_raw.get("host", "127.0.0.1"), "overlay_server.host"),
        port=_as_int(overlay_raw.get("port", 8766), "overlay_server.port"),
        path=_as_str(overlay_raw.get("path", "/overlay"), "overlay_server.path"),
    )

    preferences_raw = _section(raw, "preferences")
    preferences_file = _as_str(
        preferences_raw.get("file", DEFAULT_PREFERENCES_FILE),
        "preferences.file",
    )
    if not preferences_file:
        raise AppConfigurationError("preferences.file cannot be empty.")
    preferences = PreferencesSettings(
        file=_resolve_path(base_dir, preferences_file),
    )

    logging_raw = _section(raw, "logging")
    level = _as_str(logging_raw.get("level", "INFO"), "logging.level").upper()
    if level not in _LOG_LEVELS:
        allowed = ", ".join(_LOG_LEVELS)
        raise AppConfigurationError(f"logging.level must be one of: {allowed}")

    return AppConfig(
        overlay_server=overlay_server,
        preferences=preferences,
        logging=LoggingSettings(level=level),
        source_file=str(path),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
