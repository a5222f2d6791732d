"""Dispatcher that executes runtime commands against the timer and overlay."""

from __future__ import annotations

import logging
from typing import Protocol

from pomodoro import TimerConfig, TimerEngine
from pomodoro.constants import DIRECTIONS
from preferences import InvalidConfigValue, PreferencesError, TimerSettings, validate_settings
from sync import SyncBridge
from contracts.shell_commands import (
    ACTION_HIDE_OVERLAY,
    ACTION_PAUSE,
    ACTION_RELOAD_SETTINGS,
    ACTION_RESET,
    ACTION_SET_DIRECTION,
    ACTION_SET_SETTINGS,
    ACTION_SHOW_OVERLAY,
    ACTION_START,
    ACTION_STATUS,
    ACTION_TOGGLE,
)

from .commands import RuntimeCommand
from .messages import action_text, status_message


class PreferencesStoreLike(Protocol):
    def load_settings(self) -> TimerSettings:
        ...

    def save_settings(self, settings: TimerSettings) -> None:
        ...


class RuntimeCommandDispatcher:
    """Routes shell and overlay commands to engine, bridge, and settings."""
    def __init__(
        self,
        *,
        logger: logging.Logger,
        engine: TimerEngine,
        bridge: SyncBridge,
        preferences: PreferencesStoreLike,
    ):
        self._logger = logger
        self._engine = engine
        self._bridge = bridge
        self._preferences = preferences

    def status_text(self) -> str:
        return status_message(
            self._engine.snapshot(),
            self._engine.config.sessions_before_long_break,
        )

    def handle(self, command: RuntimeCommand) -> str:
        action = command.action
        self._logger.debug("Handling %s command from %s", action, command.source)

        if action == ACTION_START:
            return action_text(action, self._engine.start())

        if action == ACTION_PAUSE:
            return action_text(action, self._engine.pause())

        if action == ACTION_TOGGLE:
            was_running = self._engine.is_running
            self._engine.toggle()
            return action_text(ACTION_PAUSE if was_running else ACTION_START, True)

        if action == ACTION_RESET:
            self._engine.reset()
            return action_text(action, True)

        if action == ACTION_SHOW_OVERLAY:
            self._bridge.publish_visibility(True)
            return action_text(action, True)

        if action == ACTION_HIDE_OVERLAY:
            self._bridge.publish_visibility(False)
            return action_text(action, True)

        if action == ACTION_RELOAD_SETTINGS:
            return self._apply_settings(self._preferences.load_settings())

        if action == ACTION_SET_SETTINGS:
            return self._save_settings(command.arguments)

        if action == ACTION_SET_DIRECTION:
            direction = command.arguments.get("direction", "")
            if direction not in DIRECTIONS:
                allowed = ", ".join(sorted(DIRECTIONS))
                return f"Unknown direction '{direction}'. Use one of: {allowed}."
            self._engine.set_direction(direction)
            return f"Counting direction set to {direction}."

        if action == ACTION_STATUS:
            return self.status_text()

        self._logger.warning("Unsupported runtime action: %s", action)
        return f"Unsupported action: {action}"

    def _save_settings(self, arguments: dict[str, str]) -> str:
        try:
            settings = validate_settings(arguments, base=self._preferences.load_settings())
        except InvalidConfigValue as error:
            self._logger.warning("Rejected settings update: %s", error)
            return f"Settings not saved: {error}"

        try:
            self._preferences.save_settings(settings)
        except PreferencesError as error:
            self._logger.error("Saving settings failed: %s", error)
            return f"Settings not saved: {error}"

        return self._apply_settings(settings)

    def _apply_settings(self, settings: TimerSettings) -> str:
        config = TimerConfig.from_settings(settings)
        self._engine.apply_config(config)
        self._bridge.publish_appearance(config)
        return (
            f"Settings applied: work {settings.work_minutes}m, "
            f"break {settings.break_minutes}m, "
            f"long break {settings.long_break_minutes}m, "
            f"{settings.sessions_before_long_break} sessions, "
            f"{settings.pet_type} ({settings.theme})."
        )
