from .scheduling import MonotonicTickScheduler, TickHandle, TickScheduler
from .service import (
    CountDirection,
    TimerConfig,
    TimerEngine,
    TimerEvent,
    TimerListener,
    TimerMode,
    TimerSnapshot,
)

__all__ = [
    "CountDirection",
    "MonotonicTickScheduler",
    "TickHandle",
    "TickScheduler",
    "TimerConfig",
    "TimerEngine",
    "TimerEvent",
    "TimerListener",
    "TimerMode",
    "TimerSnapshot",
]
