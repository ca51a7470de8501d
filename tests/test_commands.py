"""Tests for the slash-command table and built-in commands."""

import pytest

from multimeter.core.exceptions import ConfigurationError
from multimeter.session.commands import BUILTIN_COMMANDS, CommandEntry, build_command_table
from multimeter.session.controller import SessionController


def _noop(controller, args):
    return None


def test_table_keeps_registration_order():
    table = build_command_table([CommandEntry("reload", "Reload.", _noop)])

    assert list(table) == ["quit", "help", "clear", "status", "reload"]


def test_table_is_read_only():
    table = build_command_table()

    with pytest.raises(TypeError):
        table["sneaky"] = CommandEntry("sneaky", "Nope.", _noop)


@pytest.mark.parametrize("name", ["quit", "", "two words", "/slash"])
def test_duplicate_or_invalid_names_are_rejected(name):
    with pytest.raises(ConfigurationError):
        build_command_table([CommandEntry(name, "Bad.", _noop)])


def test_help_lists_one_line_per_command(console, gauges):
    controller = SessionController(console, gauges, build_command_table())

    controller.dispatch_command("/help")

    lines = console.of("system")
    assert lines[0] == "Available commands:"
    assert lines[1:] == [f"/{entry.name}\t{entry.description}" for entry in BUILTIN_COMMANDS]
    assert "/quit\tExit the program." in lines


def test_clear_empties_console(console, gauges):
    controller = SessionController(console, gauges, build_command_table())
    console.add_lines("log", "old output")

    controller.dispatch_command("/clear")

    assert console.lines == []
    assert console.clear_count == 1


def test_status_reports_state_and_limits(console, gauges):
    controller = SessionController(console, gauges, build_command_table())

    controller.dispatch_command("/status")

    lines = console.of("system")
    assert lines[0] == "Server: https://screeps.com (shard0)"
    assert "State: disconnected" in lines
    assert "CPU limit: 1" in lines
    assert "Memory limit: 2048K" in lines
