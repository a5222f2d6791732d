"""Configuration model for the overlay websocket channel."""

from __future__ import annotations

from dataclasses import dataclass


class SyncConfigurationError(Exception):
    """Raised when overlay channel configuration is invalid."""


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8766
DEFAULT_PATH = "/overlay"
HEALTHZ_PATH = "/healthz"


@dataclass(frozen=True)
class OverlayServerConfig:
    """Validated overlay server configuration derived from app settings."""
    enabled: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    path: str = DEFAULT_PATH

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise SyncConfigurationError("overlay_server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise SyncConfigurationError(
                f"overlay_server.port must be in [1, 65535], got: {self.port}"
            )

        if not self.path.startswith("/"):
            raise SyncConfigurationError(
                f"overlay_server.path must start with '/', got: {self.path}"
            )

        if self.path == HEALTHZ_PATH:
            raise SyncConfigurationError(
                f"overlay_server.path must not shadow {HEALTHZ_PATH}"
            )

    @property
    def websocket_path(self) -> str:
        return self.path

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_settings(cls, settings) -> "OverlayServerConfig":
        path = (settings.path or "").strip() or DEFAULT_PATH
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            path=path,
        )
