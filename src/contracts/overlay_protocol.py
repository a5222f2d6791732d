"""Overlay websocket event, command, and visual state constants."""

from __future__ import annotations

# Primary -> overlay event types
EVENT_HELLO = "hello"
EVENT_CAT_STATE = "cat_state"
EVENT_CAT_THEME = "cat_theme"
EVENT_OVERLAY_VISIBILITY = "overlay_visibility"

# Overlay -> primary message type
MESSAGE_COMMAND = "command"

# Overlay / tray commands (no payload)
COMMAND_REQUEST_START = "requestStart"
COMMAND_REQUEST_PAUSE = "requestPause"
COMMAND_REQUEST_SHOW = "requestShow"
COMMAND_REQUEST_HIDE = "requestHide"

OVERLAY_COMMANDS: frozenset[str] = frozenset(
    {
        COMMAND_REQUEST_START,
        COMMAND_REQUEST_PAUSE,
        COMMAND_REQUEST_SHOW,
        COMMAND_REQUEST_HIDE,
    }
)

# Overlay visual states
VISUAL_WORKING = "working"
VISUAL_ON_BREAK = "onBreak"
VISUAL_IDLE = "idle"

# cat_state payload keys
KEY_IS_RUNNING = "isRunning"
KEY_MODE = "mode"
KEY_THEME = "theme"
KEY_PET_TYPE = "petType"
KEY_VISIBLE = "visible"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_CAT_STATE,
        EVENT_CAT_THEME,
        EVENT_OVERLAY_VISIBILITY,
    }
)

# Replay order for late-joining overlays; appearance first so the first
# state frame renders with the right skin.
STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_CAT_THEME,
    EVENT_CAT_STATE,
    EVENT_OVERLAY_VISIBILITY,
)
