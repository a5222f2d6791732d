"""Single-threaded pomodoro state machine owning the authoritative timer state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .constants import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_PET_TYPE,
    DEFAULT_SESSIONS_BEFORE_LONG_BREAK,
    DEFAULT_THEME,
    DEFAULT_WORK_MINUTES,
    DIRECTION_COUNTDOWN,
    DIRECTION_COUNTUP,
    DIRECTIONS,
    EVENT_DISPLAY_UPDATE,
    EVENT_INTERVAL_COMPLETE,
    EVENT_STATE_CHANGED,
    MODE_BREAK,
    MODE_LONG_BREAK,
    MODE_WORK,
    REASON_COMPLETED,
    REASON_CONFIG_APPLIED,
    REASON_DIRECTION_CHANGED,
    REASON_PAUSED,
    REASON_RESET,
    REASON_STARTED,
    REASON_TICK,
    SECONDS_PER_MINUTE,
    TICK_INTERVAL_SECONDS,
)
from .scheduling import TickHandle, TickScheduler

TimerMode = Literal["work", "break", "longBreak"]
CountDirection = Literal["countdown", "countup"]
TimerEventKind = Literal["state_changed", "display_update", "interval_complete"]


@dataclass(frozen=True)
class TimerConfig:
    """Interval durations (seconds) and overlay appearance for the engine."""
    work_duration: int = DEFAULT_WORK_MINUTES * SECONDS_PER_MINUTE
    break_duration: int = DEFAULT_BREAK_MINUTES * SECONDS_PER_MINUTE
    long_break_duration: int = DEFAULT_LONG_BREAK_MINUTES * SECONDS_PER_MINUTE
    sessions_before_long_break: int = DEFAULT_SESSIONS_BEFORE_LONG_BREAK
    pet_type: str = DEFAULT_PET_TYPE
    theme: str = DEFAULT_THEME

    def __post_init__(self) -> None:
        for field_name in ("work_duration", "break_duration", "long_break_duration"):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be greater than zero")
        if self.sessions_before_long_break < 1:
            raise ValueError("sessions_before_long_break must be at least 1")

    def duration_for(self, mode: str) -> int:
        if mode == MODE_BREAK:
            return self.break_duration
        if mode == MODE_LONG_BREAK:
            return self.long_break_duration
        return self.work_duration

    @classmethod
    def from_settings(cls, settings) -> "TimerConfig":
        """Build a config from minute-based stored settings."""
        return cls(
            work_duration=int(settings.work_minutes) * SECONDS_PER_MINUTE,
            break_duration=int(settings.break_minutes) * SECONDS_PER_MINUTE,
            long_break_duration=int(settings.long_break_minutes) * SECONDS_PER_MINUTE,
            sessions_before_long_break=int(settings.sessions_before_long_break),
            pet_type=settings.pet_type,
            theme=settings.theme,
        )


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable copy of the timer state handed to displays and publishers."""
    mode: TimerMode
    remaining_seconds: int
    is_running: bool
    session_count: int
    accumulated_break_seconds: int
    count_direction: CountDirection
    duration_seconds: int

    @property
    def progress(self) -> float:
        """Fraction of the current interval that has elapsed, in [0, 1]."""
        if self.duration_seconds <= 0:
            return 0.0
        if self.count_direction == DIRECTION_COUNTUP:
            elapsed = self.remaining_seconds
        else:
            elapsed = self.duration_seconds - self.remaining_seconds
        return max(0.0, min(1.0, elapsed / self.duration_seconds))


@dataclass(frozen=True)
class TimerEvent:
    """Notification delivered to engine subscribers."""
    kind: TimerEventKind
    reason: str
    snapshot: TimerSnapshot


TimerListener = Callable[[TimerEvent], None]


@dataclass
class _TimerState:
    mode: TimerMode
    remaining_seconds: int
    is_running: bool = False
    session_count: int = 1
    accumulated_break_seconds: int = 0
    count_direction: CountDirection = DIRECTION_COUNTDOWN


class TimerEngine:
    """Work/break cycle state machine with countdown and count-up directions.

    The engine never touches a clock directly: `start()` asks the injected
    scheduler for a repeating one-second callback and every callback is a
    `tick()`. All operations are synchronous and must be called from the
    thread that drives the scheduler.
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        *,
        config: Optional[TimerConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._scheduler = scheduler
        self._config = config or TimerConfig()
        self._logger = logger or logging.getLogger("pomodoro")
        self._tick_handle: Optional[TickHandle] = None
        self._listeners: list[TimerListener] = []
        self._state = _TimerState(
            mode=MODE_WORK,
            remaining_seconds=self._config.work_duration,
        )

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    def snapshot(self) -> TimerSnapshot:
        state = self._state
        return TimerSnapshot(
            mode=state.mode,
            remaining_seconds=state.remaining_seconds,
            is_running=state.is_running,
            session_count=state.session_count,
            accumulated_break_seconds=state.accumulated_break_seconds,
            count_direction=state.count_direction,
            duration_seconds=self._config.duration_for(state.mode),
        )

    def subscribe(self, listener: TimerListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> bool:
        if self._state.is_running:
            return False

        self._state.is_running = True
        self._tick_handle = self._scheduler.schedule_repeating(
            TICK_INTERVAL_SECONDS,
            self.tick,
        )
        self._logger.info(
            "Timer started: mode=%s remaining=%ss direction=%s",
            self._state.mode,
            self._state.remaining_seconds,
            self._state.count_direction,
        )
        self._emit(EVENT_STATE_CHANGED, REASON_STARTED)
        return True

    def pause(self) -> bool:
        if not self._state.is_running:
            return False

        self._stop_ticking()
        self._logger.info(
            "Timer paused: mode=%s remaining=%ss",
            self._state.mode,
            self._state.remaining_seconds,
        )
        self._emit(EVENT_STATE_CHANGED, REASON_PAUSED)
        return True

    def toggle(self) -> bool:
        if self._state.is_running:
            return self.pause()
        return self.start()

    def reset(self) -> None:
        self._stop_ticking()
        self._state.remaining_seconds = self._config.duration_for(self._state.mode)
        self._logger.info(
            "Timer reset: mode=%s remaining=%ss",
            self._state.mode,
            self._state.remaining_seconds,
        )
        self._emit(EVENT_STATE_CHANGED, REASON_RESET)

    def tick(self) -> None:
        state = self._state
        if not state.is_running:
            return

        if state.count_direction == DIRECTION_COUNTUP:
            state.remaining_seconds += 1
            self._emit(EVENT_DISPLAY_UPDATE, REASON_TICK)
            return

        state.remaining_seconds -= 1
        self._emit(EVENT_DISPLAY_UPDATE, REASON_TICK)
        if state.remaining_seconds <= 0:
            self._complete_interval()

    def apply_config(self, config: TimerConfig) -> None:
        self._config = config
        if not self._state.is_running:
            self._state.remaining_seconds = config.duration_for(self._state.mode)
        self._logger.info(
            "Timer config applied: work=%ss break=%ss long_break=%ss sessions=%s",
            config.work_duration,
            config.break_duration,
            config.long_break_duration,
            config.sessions_before_long_break,
        )
        self._emit(EVENT_STATE_CHANGED, REASON_CONFIG_APPLIED)

    def set_direction(self, direction: str) -> None:
        if direction not in DIRECTIONS:
            raise ValueError(f"Unsupported count direction: {direction}")

        state = self._state
        if direction == state.count_direction:
            return

        # An untouched paused interval is re-seated to the new direction's
        # starting value; anything already counted is kept.
        untouched = (
            not state.is_running
            and state.remaining_seconds == self._starting_value(state.mode)
        )
        state.count_direction = direction  # type: ignore[assignment]
        if untouched:
            state.remaining_seconds = self._starting_value(state.mode)
        self._logger.info("Count direction set to %s", direction)
        self._emit(EVENT_STATE_CHANGED, REASON_DIRECTION_CHANGED)

    def _complete_interval(self) -> None:
        state = self._state
        config = self._config
        finished_mode = state.mode

        if finished_mode == MODE_WORK:
            state.session_count += 1
            if state.session_count > config.sessions_before_long_break:
                state.mode = MODE_LONG_BREAK
                state.session_count = 1
            else:
                state.mode = MODE_BREAK
        elif finished_mode == MODE_BREAK:
            state.accumulated_break_seconds += config.break_duration
            state.mode = MODE_WORK
        else:
            state.accumulated_break_seconds += config.long_break_duration
            state.mode = MODE_WORK

        state.remaining_seconds = config.duration_for(state.mode)
        self._stop_ticking()
        self._logger.info(
            "Interval completed: %s -> %s (session=%s, accumulated_break=%ss)",
            finished_mode,
            state.mode,
            state.session_count,
            state.accumulated_break_seconds,
        )
        self._emit(EVENT_INTERVAL_COMPLETE, REASON_COMPLETED)
        self._emit(EVENT_STATE_CHANGED, REASON_COMPLETED)

    def _starting_value(self, mode: str) -> int:
        if self._state.count_direction == DIRECTION_COUNTUP:
            return 0
        return self._config.duration_for(mode)

    def _stop_ticking(self) -> None:
        self._state.is_running = False
        handle = self._tick_handle
        self._tick_handle = None
        if handle is not None:
            handle.cancel()

    def _emit(self, kind: TimerEventKind, reason: str) -> None:
        event = TimerEvent(kind=kind, reason=reason, snapshot=self.snapshot())
        for listener in tuple(self._listeners):
            try:
                listener(event)
            except Exception as error:
                self._logger.error(
                    "Timer listener failed on %s: %s",
                    kind,
                    error,
                    exc_info=True,
                )
