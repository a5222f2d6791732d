"""Serialization of overlay events and commands plus sticky replay state."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.overlay_protocol import (
    MESSAGE_COMMAND,
    OVERLAY_COMMANDS,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)


class MessageDecodeError(ValueError):
    """Raised when a websocket frame is not a well-formed protocol message."""


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def make_command(command: str) -> str:
    """Serialize an overlay command frame."""
    if command not in OVERLAY_COMMANDS:
        raise ValueError(f"Unknown overlay command: {command}")
    return json.dumps({"type": MESSAGE_COMMAND, "command": command})


def decode_message(raw: str | bytes) -> dict[str, Any]:
    """Decode a JSON text frame into a dict carrying a string `type`."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise MessageDecodeError("Message is not valid UTF-8") from error

    try:
        message = json.loads(raw)
    except json.JSONDecodeError as error:
        raise MessageDecodeError(f"Message is not valid JSON: {error}") from error

    if not isinstance(message, dict):
        raise MessageDecodeError("Message must be a JSON object")
    if not isinstance(message.get("type"), str):
        raise MessageDecodeError("Message is missing a string 'type'")
    return message


def parse_command(raw: str | bytes) -> Optional[str]:
    """Return the overlay command carried by a frame, or None for other types."""
    message = decode_message(raw)
    if message["type"] != MESSAGE_COMMAND:
        return None

    command = message.get("command")
    if command not in OVERLAY_COMMANDS:
        raise MessageDecodeError(f"Unknown overlay command: {command!r}")
    return command


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to newly connected overlays."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]
