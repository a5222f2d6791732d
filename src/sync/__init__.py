"""Overlay synchronization channel: websocket server and state bridge."""

from .bridge import SyncBridge, appearance_payload, overlay_payload
from .config import OverlayServerConfig, SyncConfigurationError
from .service import OverlayServer

__all__ = [
    "OverlayServer",
    "OverlayServerConfig",
    "SyncBridge",
    "SyncConfigurationError",
    "appearance_payload",
    "overlay_payload",
]
