"""Primary-surface display model and its console renderer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pomodoro import TimerConfig, TimerEvent, TimerSnapshot
from pomodoro.constants import DIRECTION_COUNTUP, EVENT_INTERVAL_COMPLETE

from .messages import MODE_INDICATORS, MODE_LABELS, format_duration


@dataclass(frozen=True)
class DisplayState:
    """Everything the main window shows, derived from one snapshot."""
    time_text: str
    label: str
    mode_indicator: str
    session_text: str
    progress: float
    count_direction: str
    is_running: bool


def build_display(snapshot: TimerSnapshot, config: TimerConfig) -> DisplayState:
    time_text = format_duration(snapshot.remaining_seconds)
    if snapshot.count_direction == DIRECTION_COUNTUP:
        time_text = f"+{time_text}"
    return DisplayState(
        time_text=time_text,
        label=MODE_LABELS.get(snapshot.mode, snapshot.mode),
        mode_indicator=MODE_INDICATORS.get(snapshot.mode, snapshot.mode),
        session_text=f"{snapshot.session_count}/{config.sessions_before_long_break}",
        progress=round(snapshot.progress, 4),
        count_direction=snapshot.count_direction,
        is_running=snapshot.is_running,
    )


class ConsoleDisplay:
    """Renders display refreshes to a text sink (stdout by default)."""

    def __init__(
        self,
        config_fn: Callable[[], TimerConfig],
        *,
        write_fn: Optional[Callable[[str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config_fn = config_fn
        self._write = write_fn or print
        self._logger = logger or logging.getLogger("runtime.display")
        self._last_rendered: Optional[DisplayState] = None

    @property
    def last_rendered(self) -> Optional[DisplayState]:
        return self._last_rendered

    def __call__(self, event: TimerEvent) -> None:
        if event.kind == EVENT_INTERVAL_COMPLETE:
            return

        display = build_display(event.snapshot, self._config_fn())
        if display == self._last_rendered:
            return
        self._last_rendered = display
        marker = ">" if display.is_running else "="
        self._write(
            f"{marker} {display.mode_indicator:<10} {display.time_text}  "
            f"session {display.session_text}  {int(display.progress * 100):3d}%"
        )
        self._logger.debug("Display refreshed (%s): %s", event.reason, display)
