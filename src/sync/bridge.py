"""Projection of timer state onto the overlay channel."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from contracts.overlay_protocol import (
    EVENT_CAT_STATE,
    EVENT_CAT_THEME,
    EVENT_OVERLAY_VISIBILITY,
    KEY_IS_RUNNING,
    KEY_MODE,
    KEY_PET_TYPE,
    KEY_THEME,
    KEY_VISIBLE,
)
from pomodoro import TimerConfig, TimerEngine, TimerEvent, TimerSnapshot
from pomodoro.constants import EVENT_STATE_CHANGED


class OverlayChannelLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


def overlay_payload(snapshot: TimerSnapshot, config: TimerConfig) -> dict[str, Any]:
    """Reduced state shared with the overlay; numeric time is never included."""
    return {
        KEY_IS_RUNNING: snapshot.is_running,
        KEY_MODE: snapshot.mode,
        KEY_THEME: config.theme,
        KEY_PET_TYPE: config.pet_type,
    }


def appearance_payload(config: TimerConfig) -> dict[str, Any]:
    return {
        KEY_THEME: config.theme,
        KEY_PET_TYPE: config.pet_type,
    }


class SyncBridge:
    """Publishes engine state changes to the overlay surface.

    With no channel (overlay disabled or server failed to start) every
    publish is dropped, matching the behaviour of an absent overlay.
    """

    def __init__(
        self,
        channel: Optional[OverlayChannelLike],
        logger: Optional[logging.Logger] = None,
    ):
        self._channel = channel
        self._logger = logger or logging.getLogger("sync")
        self._engine: Optional[TimerEngine] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._overlay_visible = True

    @property
    def overlay_visible(self) -> bool:
        return self._overlay_visible

    def attach(self, engine: TimerEngine) -> None:
        self.detach()
        self._engine = engine
        self._unsubscribe = engine.subscribe(self._on_timer_event)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._engine = None

    def publish_startup_sync(self) -> None:
        engine = self._engine
        if engine is None:
            return
        self.publish_appearance(engine.config)
        self.publish_state(engine.snapshot(), engine.config)
        self.publish_visibility(self._overlay_visible)

    def publish_state(self, snapshot: TimerSnapshot, config: TimerConfig) -> None:
        self._publish(EVENT_CAT_STATE, **overlay_payload(snapshot, config))

    def publish_appearance(self, config: TimerConfig) -> None:
        self._publish(EVENT_CAT_THEME, **appearance_payload(config))

    def publish_visibility(self, visible: bool) -> None:
        self._overlay_visible = bool(visible)
        self._publish(EVENT_OVERLAY_VISIBILITY, **{KEY_VISIBLE: self._overlay_visible})

    def _on_timer_event(self, event: TimerEvent) -> None:
        if event.kind != EVENT_STATE_CHANGED or self._engine is None:
            return
        self.publish_state(event.snapshot, self._engine.config)

    def _publish(self, event_type: str, **payload: Any) -> None:
        if self._channel is None:
            return
        try:
            self._channel.publish(event_type, **payload)
        except Exception as error:
            self._logger.warning("Overlay publish failed (%s): %s", event_type, error)
