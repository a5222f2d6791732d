"""Shell (tray menu) command names and their mapping to runtime actions."""

from __future__ import annotations

from .overlay_protocol import (
    COMMAND_REQUEST_HIDE,
    COMMAND_REQUEST_PAUSE,
    COMMAND_REQUEST_SHOW,
    COMMAND_REQUEST_START,
)

SHELL_START_TIMER = "start-timer"
SHELL_PAUSE_TIMER = "pause-timer"
SHELL_TOGGLE_TIMER = "toggle-timer"
SHELL_RESET_TIMER = "reset-timer"
SHELL_SHOW_OVERLAY = "show-overlay"
SHELL_HIDE_OVERLAY = "hide-overlay"
SHELL_SETTINGS_UPDATED = "settings-updated"
SHELL_SET_SETTINGS = "set-settings"
SHELL_SET_DIRECTION = "set-direction"
SHELL_STATUS = "status"
SHELL_QUIT = "quit"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_TOGGLE = "toggle"
ACTION_RESET = "reset"
ACTION_SHOW_OVERLAY = "show_overlay"
ACTION_HIDE_OVERLAY = "hide_overlay"
ACTION_RELOAD_SETTINGS = "reload_settings"
ACTION_SET_SETTINGS = "set_settings"
ACTION_SET_DIRECTION = "set_direction"
ACTION_STATUS = "status"
ACTION_QUIT = "quit"

SHELL_COMMAND_TO_ACTION: dict[str, str] = {
    SHELL_START_TIMER: ACTION_START,
    SHELL_PAUSE_TIMER: ACTION_PAUSE,
    SHELL_TOGGLE_TIMER: ACTION_TOGGLE,
    SHELL_RESET_TIMER: ACTION_RESET,
    SHELL_SHOW_OVERLAY: ACTION_SHOW_OVERLAY,
    SHELL_HIDE_OVERLAY: ACTION_HIDE_OVERLAY,
    SHELL_SETTINGS_UPDATED: ACTION_RELOAD_SETTINGS,
    SHELL_SET_SETTINGS: ACTION_SET_SETTINGS,
    SHELL_SET_DIRECTION: ACTION_SET_DIRECTION,
    SHELL_STATUS: ACTION_STATUS,
    SHELL_QUIT: ACTION_QUIT,
}

OVERLAY_COMMAND_TO_ACTION: dict[str, str] = {
    COMMAND_REQUEST_START: ACTION_START,
    COMMAND_REQUEST_PAUSE: ACTION_PAUSE,
    COMMAND_REQUEST_SHOW: ACTION_SHOW_OVERLAY,
    COMMAND_REQUEST_HIDE: ACTION_HIDE_OVERLAY,
}

RUNTIME_ACTIONS: frozenset[str] = frozenset(SHELL_COMMAND_TO_ACTION.values())
