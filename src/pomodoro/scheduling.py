"""Cooperative repeating-callback scheduler driven by the primary runtime loop."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol


class TickHandle(Protocol):
    def cancel(self) -> None:
        ...


class TickScheduler(Protocol):
    """Scheduling layer the timer engine uses for its one-second tick."""

    def schedule_repeating(
        self,
        interval_seconds: float,
        callback: Callable[[], None],
    ) -> TickHandle:
        ...


class _ScheduledTask:
    def __init__(
        self,
        scheduler: "MonotonicTickScheduler",
        interval_seconds: float,
        callback: Callable[[], None],
        next_due: float,
    ):
        self._scheduler = scheduler
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.next_due = next_due
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._scheduler._discard(self)


class MonotonicTickScheduler:
    """Deadline scheduler; `run_due()` is called once per runtime loop turn.

    Nothing runs on a background thread: callbacks fire inside `run_due()`
    on the caller's thread. A loop turn that arrives late fires one callback
    per elapsed interval so a countdown never silently loses seconds.
    """

    def __init__(
        self,
        *,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("pomodoro.scheduler")
        self._tasks: list[_ScheduledTask] = []

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def schedule_repeating(
        self,
        interval_seconds: float,
        callback: Callable[[], None],
    ) -> _ScheduledTask:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")

        task = _ScheduledTask(
            self,
            float(interval_seconds),
            callback,
            self._monotonic() + float(interval_seconds),
        )
        self._tasks.append(task)
        return task

    def seconds_until_next(self) -> Optional[float]:
        if not self._tasks:
            return None
        next_due = min(task.next_due for task in self._tasks)
        return max(0.0, next_due - self._monotonic())

    def run_due(self) -> int:
        """Fire every callback whose deadline has passed; return the fire count."""
        fired = 0
        now = self._monotonic()
        for task in tuple(self._tasks):
            while not task.cancelled and task.next_due <= now:
                task.next_due += task.interval_seconds
                fired += 1
                try:
                    task.callback()
                except Exception as error:
                    self._logger.error(
                        "Scheduled callback failed: %s",
                        error,
                        exc_info=True,
                    )
        return fired

    def _discard(self, task: _ScheduledTask) -> None:
        if task in self._tasks:
            self._tasks.remove(task)
