"""Primary-surface loop: cooperative ticks plus queued shell/overlay commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Callable, Optional, TextIO

from pomodoro import MonotonicTickScheduler, TimerConfig, TimerEngine
from sync import OverlayServer, SyncBridge
from contracts.shell_commands import ACTION_QUIT

from .commands import QueueCommandPublisher, RuntimeCommand
from .console import ConsoleCommandReader
from .dispatch import PreferencesStoreLike, RuntimeCommandDispatcher
from .display import ConsoleDisplay
from .ticks import Notifier, TickDependencies, TickProcessor

MAX_POLL_SECONDS = 0.25


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[Callable[[], None]], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    preferences: PreferencesStoreLike
    overlay_server: Optional[OverlayServer]
    notifier: Optional[Notifier]
    hooks: RuntimeHooks
    console_input: Optional[TextIO] = None
    write_fn: Callable[[str], None] = print
    scheduler: Optional[MonotonicTickScheduler] = None
    command_queue: Optional[Queue] = field(default=None, compare=False)


class RuntimeEngine:
    """Top-level application controller owning the single TimerEngine.

    Everything that touches timer state runs on the thread that calls
    `run()`. Other threads (overlay server, console reader) only enqueue
    `RuntimeCommand`s.
    """
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._write = bootstrap.write_fn
        self._stop_requested = False

        self._scheduler = bootstrap.scheduler or MonotonicTickScheduler(
            logger=logging.getLogger("pomodoro.scheduler"),
        )
        settings = bootstrap.preferences.load_settings()
        self._engine = TimerEngine(
            self._scheduler,
            config=TimerConfig.from_settings(settings),
            logger=logging.getLogger("pomodoro"),
        )

        self._bridge = SyncBridge(bootstrap.overlay_server, logger=logging.getLogger("sync"))
        self._bridge.attach(self._engine)

        self._display = ConsoleDisplay(
            lambda: self._engine.config,
            write_fn=self._write,
        )
        self._tick_processor = TickProcessor(
            TickDependencies(
                notifier=bootstrap.notifier,
                logger=self._logger,
            )
        )
        self._unsubscribers = [
            self._engine.subscribe(self._display),
            self._engine.subscribe(self._tick_processor),
        ]

        self._dispatcher = RuntimeCommandDispatcher(
            logger=self._logger,
            engine=self._engine,
            bridge=self._bridge,
            preferences=bootstrap.preferences,
        )

        self._command_queue: Queue = bootstrap.command_queue or Queue()
        self._publisher = QueueCommandPublisher(self._command_queue)
        if bootstrap.overlay_server is not None:
            bootstrap.overlay_server.set_command_handler(
                self._publisher.publish_overlay_command
            )

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def bridge(self) -> SyncBridge:
        return self._bridge

    @property
    def publisher(self) -> QueueCommandPublisher:
        return self._publisher

    def request_stop(self) -> None:
        self._stop_requested = True

    def run(self) -> int:
        self._bridge.publish_startup_sync()
        self._write(self._dispatcher.status_text())

        try:
            self._bootstrap.hooks.setup_signal_handlers(self.request_stop)

            if self._bootstrap.console_input is not None:
                ConsoleCommandReader(
                    self._publisher,
                    stream=self._bootstrap.console_input,
                    on_error=self._write,
                    logger=logging.getLogger("runtime.console"),
                ).start()

            self._logger.info("Ready.")
            while not self._stop_requested:
                self._scheduler.run_due()

                command = self._poll_command()
                if command is None:
                    continue
                if command.action == ACTION_QUIT:
                    self._logger.info("Quit requested from %s.", command.source)
                    return 0
                self._handle_command(command)

            self._logger.info("Stop requested.")
            return 0

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def _poll_command(self) -> Optional[RuntimeCommand]:
        timeout = MAX_POLL_SECONDS
        until_tick = self._scheduler.seconds_until_next()
        if until_tick is not None:
            timeout = min(timeout, until_tick)
        try:
            return self._command_queue.get(timeout=timeout)
        except Empty:
            return None

    def _handle_command(self, command: RuntimeCommand) -> None:
        reply = self._dispatcher.handle(command)
        if command.source == "shell":
            self._write(reply)
        else:
            self._logger.info("Overlay %s: %s", command.action, reply)

    def _shutdown(self) -> None:
        self._engine.pause()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._bridge.detach()

        overlay_server = self._bootstrap.overlay_server
        if overlay_server is not None:
            self._logger.info("Stopping overlay server...")
            try:
                overlay_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping overlay server: %s", error, exc_info=True)
