"""Websocket client connecting the overlay surface to the primary surface."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect

from contracts.overlay_protocol import (
    EVENT_CAT_STATE,
    EVENT_CAT_THEME,
    EVENT_HELLO,
    EVENT_OVERLAY_VISIBILITY,
    KEY_VISIBLE,
)
from sync.events import MessageDecodeError, decode_message, make_command

from .view import OverlayView

HOUSEKEEPING_INTERVAL_SECONDS = 0.1


class OverlayClient:
    """Keeps the overlay view in step with the primary surface.

    Commands issued while disconnected are dropped rather than queued, so a
    click on a stale overlay never replays against a restarted primary.
    """

    def __init__(
        self,
        url: str,
        view_factory: Callable[[Callable[[str], None]], OverlayView],
        logger: Optional[logging.Logger] = None,
        *,
        reconnect_delay_seconds: float = 2.0,
        monotonic_fn: Optional[Callable[[], float]] = None,
    ):
        self._url = url
        self._logger = logger or logging.getLogger("overlay.client")
        self._reconnect_delay = reconnect_delay_seconds
        self._monotonic = monotonic_fn or time.monotonic
        self._connection: Optional[ClientConnection] = None
        self._outbound: Optional[asyncio.Queue[str]] = None
        self._view = view_factory(self.send_command)

    @property
    def view(self) -> OverlayView:
        return self._view

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def send_command(self, command: str) -> None:
        if self._connection is None or self._outbound is None:
            self._logger.info("Primary surface unavailable; dropping %s", command)
            return
        self._outbound.put_nowait(make_command(command))

    def handle_message(self, raw: str | bytes) -> None:
        try:
            message = decode_message(raw)
        except MessageDecodeError as error:
            self._logger.warning("Dropping malformed message from primary: %s", error)
            return

        event_type = message["type"]
        if event_type == EVENT_CAT_STATE:
            self._view.apply_state(message)
        elif event_type == EVENT_CAT_THEME:
            self._view.apply_theme(message)
        elif event_type == EVENT_OVERLAY_VISIBILITY:
            visible = message.get(KEY_VISIBLE)
            if isinstance(visible, bool):
                self._view.set_visible(visible)
        elif event_type == EVENT_HELLO:
            self._logger.info("Connected to primary surface at %s", self._url)
        else:
            self._logger.debug("Ignoring event type: %s", event_type)

    async def run(self, stop: asyncio.Event) -> None:
        housekeeping = asyncio.create_task(self._housekeeping(stop))
        try:
            while not stop.is_set():
                try:
                    await self._run_connection(stop)
                except (OSError, websockets.exceptions.WebSocketException) as error:
                    self._logger.info("Primary surface not reachable: %s", error)

                if stop.is_set():
                    break
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(stop.wait(), timeout=self._reconnect_delay)
        finally:
            housekeeping.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await housekeeping

    async def _run_connection(self, stop: asyncio.Event) -> None:
        async with connect(self._url, logger=self._logger) as connection:
            self._connection = connection
            self._outbound = asyncio.Queue()
            sender = asyncio.create_task(self._send_loop(connection, self._outbound))
            stopper = asyncio.create_task(stop.wait())
            receiver = asyncio.create_task(self._receive_loop(connection))
            try:
                await asyncio.wait(
                    {sender, stopper, receiver},
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                self._connection = None
                self._outbound = None
                for task in (sender, stopper, receiver):
                    task.cancel()
                await asyncio.gather(sender, stopper, receiver, return_exceptions=True)

    async def _receive_loop(self, connection: ClientConnection) -> None:
        try:
            async for message in connection:
                self.handle_message(message)
        except websockets.exceptions.ConnectionClosed:
            pass
        self._logger.info("Primary surface disconnected")

    async def _send_loop(self, connection: ClientConnection, outbound: asyncio.Queue[str]) -> None:
        while True:
            message = await outbound.get()
            try:
                await connection.send(message)
            except websockets.exceptions.ConnectionClosed as error:
                self._logger.warning("Command not delivered: %s", error)
                return

    async def _housekeeping(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            self._view.on_timer(self._monotonic())
            await asyncio.sleep(HOUSEKEEPING_INTERVAL_SECONDS)
