"""
Local slash-command table.

The table is built once at startup and handed to the controller; it is a
read-only mapping so nothing can register commands behind its back.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from .controller import SessionController

COMMAND_MARKER = "/"

CommandHandler = Callable[["SessionController", list[str]], None]


@dataclass(frozen=True)
class CommandEntry:
    """A named local command."""

    name: str
    description: str
    handler: CommandHandler


def command_quit(controller: SessionController, args: list[str]) -> None:
    controller.request_exit()


def command_help(controller: SessionController, args: list[str]) -> None:
    lines = ["Available commands:"]
    lines.extend(
        f"{COMMAND_MARKER}{entry.name}\t{entry.description}"
        for entry in controller.commands.values()
    )
    controller.console.add_lines("system", "\n".join(lines))


def command_clear(controller: SessionController, args: list[str]) -> None:
    controller.console.clear()


def command_status(controller: SessionController, args: list[str]) -> None:
    session = controller.session
    lines = [
        f"Server: {controller.server.base_url}"
        + (f" ({controller.server.shard})" if controller.server.shard else ""),
        f"State: {session.state.value}",
    ]
    if session.user_id:
        lines.append(f"User: {session.username or session.user_id}")
    lines.append(f"CPU limit: {session.cpu_limit}")
    lines.append(f"Memory limit: {session.memory_limit // 1024}K")
    controller.console.add_lines("system", "\n".join(lines))


BUILTIN_COMMANDS = (
    CommandEntry("quit", "Exit the program.", command_quit),
    CommandEntry("help", "List the available commands.", command_help),
    CommandEntry("clear", "Clear the console scrollback.", command_clear),
    CommandEntry("status", "Show connection state and account limits.", command_status),
)


def build_command_table(extra: Iterable[CommandEntry] = ()) -> Mapping[str, CommandEntry]:
    """
    Build the immutable command mapping, built-ins first.

    Raises:
        ConfigurationError: If two commands share a name
    """
    table: dict[str, CommandEntry] = {}
    for entry in (*BUILTIN_COMMANDS, *extra):
        if not entry.name or COMMAND_MARKER in entry.name or entry.name.split() != [entry.name]:
            raise ConfigurationError(f"Invalid command name: {entry.name!r}")
        if entry.name in table:
            raise ConfigurationError(f"Duplicate command: {entry.name}")
        table[entry.name] = entry
    return MappingProxyType(table)
