"""Status and feedback text builders for shell commands."""

from __future__ import annotations

from pomodoro import TimerSnapshot
from pomodoro.constants import DIRECTION_COUNTUP, MODE_BREAK, MODE_LONG_BREAK, MODE_WORK
from contracts.shell_commands import (
    ACTION_HIDE_OVERLAY,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SHOW_OVERLAY,
    ACTION_START,
)

MODE_LABELS: dict[str, str] = {
    MODE_WORK: "Work Time",
    MODE_BREAK: "Break Time",
    MODE_LONG_BREAK: "Long Break",
}

MODE_INDICATORS: dict[str, str] = {
    MODE_WORK: "Work",
    MODE_BREAK: "Break",
    MODE_LONG_BREAK: "Long Break",
}


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def status_message(snapshot: TimerSnapshot, sessions_before_long_break: int) -> str:
    """Build one-line status text for the current timer snapshot."""
    label = MODE_LABELS.get(snapshot.mode, snapshot.mode)
    clock = format_duration(snapshot.remaining_seconds)
    if snapshot.count_direction == DIRECTION_COUNTUP:
        clock = f"+{clock}"
    state = "running" if snapshot.is_running else "paused"
    return (
        f"{label} {clock} ({state}, session "
        f"{snapshot.session_count}/{sessions_before_long_break}, "
        f"break total {format_duration(snapshot.accumulated_break_seconds)})"
    )


def action_text(action: str, accepted: bool) -> str:
    """Return feedback text for a timer or overlay action."""
    if action == ACTION_START:
        return "Timer started." if accepted else "The timer is already running."
    if action == ACTION_PAUSE:
        return "Timer paused." if accepted else "The timer is not running."
    if action == ACTION_RESET:
        return "Timer reset."
    if action == ACTION_SHOW_OVERLAY:
        return "Overlay shown."
    if action == ACTION_HIDE_OVERLAY:
        return "Overlay hidden."
    return "Done."
