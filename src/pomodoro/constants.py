"""Mode, direction, event, and reason constants used by the timer engine."""

from __future__ import annotations

TICK_INTERVAL_SECONDS = 1.0
SECONDS_PER_MINUTE = 60

MODE_WORK = "work"
MODE_BREAK = "break"
MODE_LONG_BREAK = "longBreak"

MODES: tuple[str, ...] = (MODE_WORK, MODE_BREAK, MODE_LONG_BREAK)

DIRECTION_COUNTDOWN = "countdown"
DIRECTION_COUNTUP = "countup"

DIRECTIONS: frozenset[str] = frozenset({DIRECTION_COUNTDOWN, DIRECTION_COUNTUP})

PET_CAT = "cat"
PET_DOG = "dog"
PET_BIRD = "bird"
PET_RABBIT = "rabbit"

PET_TYPES: tuple[str, ...] = (PET_CAT, PET_DOG, PET_BIRD, PET_RABBIT)

THEME_CHUBBY_GRAY = "chubby-gray"

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_SESSIONS_BEFORE_LONG_BREAK = 4
DEFAULT_THEME = THEME_CHUBBY_GRAY
DEFAULT_PET_TYPE = PET_CAT

EVENT_STATE_CHANGED = "state_changed"
EVENT_DISPLAY_UPDATE = "display_update"
EVENT_INTERVAL_COMPLETE = "interval_complete"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_TICK = "tick"
REASON_COMPLETED = "completed"
REASON_CONFIG_APPLIED = "config_applied"
REASON_DIRECTION_CHANGED = "direction_changed"

INTERVAL_COMPLETE_TITLE = "PomodoroCat"
INTERVAL_COMPLETE_MESSAGE = "Time is up! Take a break!"
