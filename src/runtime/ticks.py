"""Interval-completion side effects: user alert and logging."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from pomodoro import TimerEvent
from pomodoro.constants import (
    EVENT_INTERVAL_COMPLETE,
    INTERVAL_COMPLETE_MESSAGE,
    INTERVAL_COMPLETE_TITLE,
)


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None:
        ...


class LoggingNotifier:
    """Default alert sink; a tray balloon or desktop toast plugs in here."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("runtime.notifier")

    def notify(self, title: str, message: str) -> None:
        self._logger.info("[%s] %s", title, message)


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing interval-completion events."""
    notifier: Optional[Notifier]
    logger: logging.Logger


class TickProcessor:
    """Fires the opaque interval-complete alert exactly once per completion."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def __call__(self, event: TimerEvent) -> None:
        if event.kind != EVENT_INTERVAL_COMPLETE:
            return

        deps = self._dependencies
        deps.logger.info(
            "Interval complete; next mode %s (%s remaining)",
            event.snapshot.mode,
            event.snapshot.remaining_seconds,
        )
        if deps.notifier is None:
            return
        try:
            deps.notifier.notify(INTERVAL_COMPLETE_TITLE, INTERVAL_COMPLETE_MESSAGE)
        except Exception as error:
            deps.logger.error("Interval notification failed: %s", error)
