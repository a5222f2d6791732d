from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection, serve
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.overlay_protocol import EVENT_HELLO

from .config import HEALTHZ_PATH, OverlayServerConfig
from .events import MessageDecodeError, StickyEventStore, make_event, parse_command

CommandHandler = Callable[[str], None]


class OverlayServer:
    """Threaded asyncio websocket server carrying primary <-> overlay traffic.

    Outbound events are best effort: publishing while the server is down or
    while no overlay is connected is a silent no-op. Inbound commands are
    handed to `command_handler` on the server thread; the handler must only
    enqueue them for the primary loop.
    """

    def __init__(
        self,
        config: OverlayServerConfig,
        logger: Optional[logging.Logger] = None,
        *,
        command_handler: Optional[CommandHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("sync.server")
        self._command_handler = command_handler
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._connected_clients: set[ServerConnection] = set()
        self._sticky = StickyEventStore()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def set_command_handler(self, handler: Optional[CommandHandler]) -> None:
        self._command_handler = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("Overlay server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="overlay-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"Overlay server did not start within {timeout_seconds:.1f}s"
            )

        if self._startup_error is not None:
            raise RuntimeError(f"Overlay server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Overlay server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload) -> None:
        message = make_event(event_type, **payload)
        self._sticky.remember(event_type, message)

        if not self.is_running or self._loop is None:
            return

        try:
            future = asyncio.run_coroutine_threadsafe(
                self._broadcast(message),
                self._loop,
            )
            future.add_done_callback(self._consume_future_exception)
        except RuntimeError:
            # Loop may be shutting down.
            return

    @staticmethod
    def _consume_future_exception(future) -> None:
        with contextlib.suppress(Exception):
            future.result()

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - needs a real socket
            self._startup_error = error
            self._logger.error("Overlay server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        async with serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "Overlay server listening on %s",
                self._config.url,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._disconnect_overlays()

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._connected_clients.add(websocket)
        self._logger.info("Overlay connected: %s", websocket.remote_address)
        try:
            await websocket.send(make_event(EVENT_HELLO, message="Overlay channel connected"))
            for message in self._sticky.snapshot():
                await websocket.send(message)
            async for message in websocket:
                self._handle_inbound(message)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Overlay disconnected: %s", websocket.remote_address)
        finally:
            self._connected_clients.discard(websocket)

    def _handle_inbound(self, raw: str | bytes) -> None:
        try:
            command = parse_command(raw)
        except MessageDecodeError as error:
            self._logger.warning("Dropping malformed overlay message: %s", error)
            return

        if command is None:
            self._logger.debug("Ignoring non-command overlay message: %s", raw)
            return

        handler = self._command_handler
        if handler is None:
            self._logger.debug("No command handler; dropping %s", command)
            return

        try:
            handler(command)
        except Exception as error:
            self._logger.error("Overlay command handler failed: %s", error, exc_info=True)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        """Let the overlay upgrade; answer health probes; refuse anything else."""
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        if path == HEALTHZ_PATH:
            return _plain_text_reply(200, "OK", "ok")
        return _plain_text_reply(404, "Not Found", "no overlay channel here")

    async def _disconnect_overlays(self) -> None:
        overlays = tuple(self._connected_clients)
        self._connected_clients.clear()
        await asyncio.gather(
            *(overlay.close(code=1001, reason="Primary surface shutting down") for overlay in overlays),
            return_exceptions=True,
        )

    async def _broadcast(self, message: str) -> None:
        overlays = tuple(self._connected_clients)
        if not overlays:
            return

        results = await asyncio.gather(
            *(overlay.send(message) for overlay in overlays),
            return_exceptions=True,
        )
        for overlay, result in zip(overlays, results):
            if isinstance(result, Exception):
                self._connected_clients.discard(overlay)
                self._logger.warning("Dropping unreachable overlay: %s", result)


def _plain_text_reply(status_code: int, reason_phrase: str, text: str) -> Response:
    body = f"{text}\n".encode("utf-8")
    headers = Headers(
        [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(body))),
            ("Cache-Control", "no-store"),
        ]
    )
    return Response(status_code, reason_phrase, headers, body)
