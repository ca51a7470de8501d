"""
Session lifecycle, topic routing and local commands.
"""

from .commands import (
    BUILTIN_COMMANDS,
    COMMAND_MARKER,
    CommandEntry,
    build_command_table,
)
from .controller import MOTD, Session, SessionController, SessionState

__all__ = [
    "BUILTIN_COMMANDS",
    "COMMAND_MARKER",
    "MOTD",
    "CommandEntry",
    "Session",
    "SessionController",
    "SessionState",
    "build_command_table",
]
