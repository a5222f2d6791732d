"""Standalone launcher for the overlay surface."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
import threading
import time
from typing import Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from sync import OverlayServerConfig, SyncConfigurationError

from .client import OverlayClient
from .view import LoggingOverlayRenderer, OverlayView

CONSOLE_HELP = "Overlay commands: pet, toggle, close, drag X Y"


def handle_console_line(view: OverlayView, line: str, *, now: float) -> Optional[str]:
    """Apply one local interaction typed on the overlay console."""
    parts = line.split()
    if not parts:
        return None

    name = parts[0].lower()
    if name == "pet":
        view.pet(now)
        return None
    if name == "toggle":
        view.request_toggle()
        return None
    if name == "close":
        view.close()
        return None
    if name == "drag" and len(parts) == 3:
        try:
            x, y = int(parts[1]), int(parts[2])
        except ValueError:
            return CONSOLE_HELP
        view.begin_drag(*view.position)
        view.drag_to(x, y)
        view.end_drag()
        return None
    return CONSOLE_HELP


def _start_console_thread(
    loop: asyncio.AbstractEventLoop,
    view: OverlayView,
    logger: logging.Logger,
) -> None:
    def apply(line: str) -> None:
        reply = handle_console_line(view, line, now=time.monotonic())
        if reply:
            logger.info(reply)

    def read() -> None:
        for line in sys.stdin:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(apply, line)

    threading.Thread(target=read, daemon=True, name="overlay-console").start()


async def run_overlay(config: OverlayServerConfig, logger: logging.Logger) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, stop.set)

    client = OverlayClient(
        config.url,
        lambda send_command: OverlayView(
            LoggingOverlayRenderer(logging.getLogger("overlay.renderer")),
            send_command=send_command,
            logger=logging.getLogger("overlay"),
        ),
        logger=logging.getLogger("overlay.client"),
    )
    if sys.stdin is not None and sys.stdin.isatty():
        logger.info(CONSOLE_HELP)
        _start_console_thread(loop, client.view, logger)

    await client.run(stop)


def main() -> int:
    """Run the overlay surface until interrupted."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("overlay")

    try:
        app_config = load_app_config(str(resolve_config_path()))
        config = OverlayServerConfig.from_settings(app_config.overlay_server)
    except (AppConfigurationError, SyncConfigurationError) as error:
        logger.error("Overlay configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(app_config.logging.level_number)
    if not config.enabled:
        logger.info("Overlay disabled via overlay_server.enabled=false")
        return 0

    try:
        asyncio.run(run_overlay(config, logger))
    except KeyboardInterrupt:
        logger.info("Stopping by user request.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
