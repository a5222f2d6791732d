"""Overlay-surface projection of the timer plus its ephemeral local state."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Callable, Literal, Mapping, Optional, Protocol

from pomodoro.constants import DEFAULT_PET_TYPE, DEFAULT_THEME, MODE_WORK, MODES, PET_TYPES
from contracts.overlay_protocol import (
    COMMAND_REQUEST_HIDE,
    COMMAND_REQUEST_PAUSE,
    COMMAND_REQUEST_START,
    KEY_IS_RUNNING,
    KEY_MODE,
    KEY_PET_TYPE,
    KEY_THEME,
    VISUAL_IDLE,
    VISUAL_ON_BREAK,
    VISUAL_WORKING,
)

VisualState = Literal["working", "onBreak", "idle"]

PETTING_SECONDS = 0.5
IDLE_FIDGET_INTERVAL_SECONDS = 10.0
IDLE_FIDGET_CHANCE = 0.1


def visual_state_for(is_running: bool, mode: str) -> VisualState:
    if not is_running:
        return VISUAL_IDLE
    if mode == MODE_WORK:
        return VISUAL_WORKING
    return VISUAL_ON_BREAK


def displayed_pet(pet_type: str) -> str:
    """Pet variant actually shown; unknown types fall back to the cat."""
    return pet_type if pet_type in PET_TYPES else DEFAULT_PET_TYPE


@dataclass(frozen=True)
class OverlayViewState:
    """Read-only projection received from the primary surface."""
    mode: str = MODE_WORK
    is_running: bool = False
    theme: str = DEFAULT_THEME
    pet_type: str = DEFAULT_PET_TYPE

    @property
    def visual_state(self) -> VisualState:
        return visual_state_for(self.is_running, self.mode)

    def merged(self, payload: Mapping[str, Any]) -> "OverlayViewState":
        """Apply a broadcast payload; missing or malformed keys keep old values."""
        changes: dict[str, Any] = {}
        mode = payload.get(KEY_MODE)
        if isinstance(mode, str) and mode in MODES:
            changes["mode"] = mode
        is_running = payload.get(KEY_IS_RUNNING)
        if isinstance(is_running, bool):
            changes["is_running"] = is_running
        theme = payload.get(KEY_THEME)
        if isinstance(theme, str) and theme:
            changes["theme"] = theme
        pet_type = payload.get(KEY_PET_TYPE)
        if isinstance(pet_type, str) and pet_type:
            changes["pet_type"] = pet_type
        return replace(self, **changes) if changes else self


@dataclass(frozen=True)
class OverlayFrame:
    """Everything a renderer needs to draw the overlay once."""
    visual_state: VisualState
    theme: str
    pet: str
    petting: bool
    visible: bool
    position: tuple[int, int]


class OverlayRenderer(Protocol):
    def render(self, frame: OverlayFrame) -> None:
        ...


class LoggingOverlayRenderer:
    """Renderer used when no windowing toolkit is attached."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("overlay.renderer")

    def render(self, frame: OverlayFrame) -> None:
        if not frame.visible:
            self._logger.info("Overlay hidden")
            return
        self._logger.info(
            "%s is %s%s (theme=%s, at %d,%d)",
            frame.pet,
            frame.visual_state,
            " and being petted" if frame.petting else "",
            frame.theme,
            frame.position[0],
            frame.position[1],
        )


class OverlayView:
    """Consumes primary broadcasts and owns overlay-only interaction state.

    Petting, idle fidgets, drag position and visibility never travel back
    to the primary surface. The only outbound traffic is the fixed command
    set passed to `send_command`.
    """

    def __init__(
        self,
        renderer: OverlayRenderer,
        *,
        send_command: Callable[[str], None],
        screen_size: tuple[int, int] = (1920, 1080),
        pet_size: tuple[int, int] = (150, 150),
        random_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._renderer = renderer
        self._send_command = send_command
        self._screen_size = screen_size
        self._pet_size = pet_size
        self._random = random_fn or random.random
        self._logger = logger or logging.getLogger("overlay")

        self._state = OverlayViewState()
        self._visible = True
        self._petting_until: Optional[float] = None
        self._next_fidget_at: Optional[float] = None
        self._position = (
            max(0, screen_size[0] - pet_size[0]),
            max(0, screen_size[1] - pet_size[1]),
        )
        self._drag_offset: Optional[tuple[int, int]] = None
        self._last_frame: Optional[OverlayFrame] = None

    @property
    def state(self) -> OverlayViewState:
        return self._state

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def petting(self) -> bool:
        return self._petting_until is not None

    @property
    def position(self) -> tuple[int, int]:
        return self._position

    def apply_state(self, payload: Mapping[str, Any]) -> None:
        self._state = self._state.merged(payload)
        self._render()

    def apply_theme(self, payload: Mapping[str, Any]) -> None:
        self._state = self._state.merged(
            {key: payload[key] for key in (KEY_THEME, KEY_PET_TYPE) if key in payload}
        )
        self._render()

    def set_visible(self, visible: bool) -> None:
        self._visible = bool(visible)
        self._render()

    def pet(self, now: float) -> None:
        self._petting_until = now + PETTING_SECONDS
        self._render()

    def on_timer(self, now: float) -> None:
        """Housekeeping called periodically by the overlay event loop."""
        if self._petting_until is not None and now >= self._petting_until:
            self._petting_until = None
            self._render()

        if self._next_fidget_at is None:
            self._next_fidget_at = now + IDLE_FIDGET_INTERVAL_SECONDS
        elif now >= self._next_fidget_at:
            self._next_fidget_at = now + IDLE_FIDGET_INTERVAL_SECONDS
            if (
                self._state.visual_state == VISUAL_IDLE
                and self._petting_until is None
                and self._random() < IDLE_FIDGET_CHANCE
            ):
                self.pet(now)

    def begin_drag(self, pointer_x: int, pointer_y: int) -> None:
        self._drag_offset = (pointer_x - self._position[0], pointer_y - self._position[1])

    def drag_to(self, pointer_x: int, pointer_y: int) -> None:
        if self._drag_offset is None:
            return
        max_x = max(0, self._screen_size[0] - self._pet_size[0])
        max_y = max(0, self._screen_size[1] - self._pet_size[1])
        x = pointer_x - self._drag_offset[0]
        y = pointer_y - self._drag_offset[1]
        self._position = (max(0, min(x, max_x)), max(0, min(y, max_y)))
        self._render()

    def end_drag(self) -> None:
        self._drag_offset = None

    def request_toggle(self) -> None:
        if self._state.is_running:
            self._send_command(COMMAND_REQUEST_PAUSE)
        else:
            self._send_command(COMMAND_REQUEST_START)

    def close(self) -> None:
        self._send_command(COMMAND_REQUEST_HIDE)

    def _render(self) -> None:
        frame = OverlayFrame(
            visual_state=self._state.visual_state,
            theme=self._state.theme,
            pet=displayed_pet(self._state.pet_type),
            petting=self._petting_until is not None,
            visible=self._visible,
            position=self._position,
        )
        if frame == self._last_frame:
            return
        self._last_frame = frame
        try:
            self._renderer.render(frame)
        except Exception as error:
            self._logger.error("Overlay render failed: %s", error, exc_info=True)
