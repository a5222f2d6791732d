"""Runtime command envelope, shell-line parsing, and queue publishing."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from queue import Queue
from typing import Literal, Optional

from contracts.shell_commands import (
    ACTION_SET_DIRECTION,
    ACTION_SET_SETTINGS,
    OVERLAY_COMMAND_TO_ACTION,
    SHELL_COMMAND_TO_ACTION,
)

CommandSource = Literal["shell", "overlay"]


class CommandParseError(ValueError):
    """Raised when a shell line does not name a known command."""


@dataclass(frozen=True)
class RuntimeCommand:
    """A normalized request for the primary loop to act on."""
    action: str
    source: CommandSource = "shell"
    arguments: dict[str, str] = field(default_factory=dict)


def parse_shell_line(line: str) -> Optional[RuntimeCommand]:
    """Parse `name [args...]`; blank lines and `#` comments yield None."""
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    try:
        parts = shlex.split(text)
    except ValueError as error:
        raise CommandParseError(f"Cannot parse command line: {error}") from error

    name, args = parts[0].lower(), parts[1:]
    action = SHELL_COMMAND_TO_ACTION.get(name)
    if action is None:
        known = ", ".join(sorted(SHELL_COMMAND_TO_ACTION))
        raise CommandParseError(f"Unknown command '{name}'. Known commands: {known}")

    if action == ACTION_SET_DIRECTION:
        if len(args) != 1:
            raise CommandParseError("set-direction expects exactly one argument")
        return RuntimeCommand(action=action, arguments={"direction": args[0].lower()})

    if action == ACTION_SET_SETTINGS:
        if not args:
            raise CommandParseError("set-settings expects key=value pairs")
        arguments: dict[str, str] = {}
        for arg in args:
            key, sep, value = arg.partition("=")
            if not sep or not key:
                raise CommandParseError(f"Expected key=value, got '{arg}'")
            arguments[key] = value
        return RuntimeCommand(action=action, arguments=arguments)

    if args:
        raise CommandParseError(f"{name} takes no arguments")
    return RuntimeCommand(action=action)


def command_from_overlay(command: str) -> Optional[RuntimeCommand]:
    action = OVERLAY_COMMAND_TO_ACTION.get(command)
    if action is None:
        return None
    return RuntimeCommand(action=action, source="overlay")


class QueueCommandPublisher:
    """Pushes commands from producer threads onto the primary loop queue."""

    def __init__(self, queue: Queue):
        self._queue = queue

    def publish(self, command: RuntimeCommand) -> None:
        self._queue.put(command)

    def publish_overlay_command(self, command: str) -> None:
        runtime_command = command_from_overlay(command)
        if runtime_command is not None:
            self._queue.put(runtime_command)
