"""Overlay surface: passive pet companion mirroring the timer mood."""

from .client import OverlayClient
from .view import (
    LoggingOverlayRenderer,
    OverlayFrame,
    OverlayRenderer,
    OverlayView,
    OverlayViewState,
    visual_state_for,
)

__all__ = [
    "LoggingOverlayRenderer",
    "OverlayClient",
    "OverlayFrame",
    "OverlayRenderer",
    "OverlayView",
    "OverlayViewState",
    "visual_state_for",
]
