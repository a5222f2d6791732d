"""Background stdin reader standing in for the tray menu."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Callable, Optional, TextIO

from .commands import CommandParseError, QueueCommandPublisher, RuntimeCommand, parse_shell_line
from contracts.shell_commands import ACTION_QUIT


class ConsoleCommandReader:
    """Reads shell command lines on a daemon thread and publishes them.

    End of input is treated as `quit` so piping a script of commands into
    the primary surface shuts it down cleanly afterwards.
    """

    def __init__(
        self,
        publisher: QueueCommandPublisher,
        *,
        stream: Optional[TextIO] = None,
        on_error: Optional[Callable[[str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._publisher = publisher
        self._stream = stream or sys.stdin
        self._logger = logger or logging.getLogger("runtime.console")
        self._on_error = on_error or self._logger.warning
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="console-commands",
        )
        self._thread.start()

    def _run(self) -> None:
        for line in self._stream:
            try:
                command = parse_shell_line(line)
            except CommandParseError as error:
                self._on_error(str(error))
                continue
            if command is not None:
                self._publisher.publish(command)

        self._logger.info("Console input closed.")
        self._publisher.publish(RuntimeCommand(action=ACTION_QUIT))
