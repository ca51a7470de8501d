"""
Console panel: bounded scrollback, input line, history and completion.

The panel never interprets what is typed. Enter posts
``ConsolePanel.LineSubmitted`` with the raw line and the application hands
it to the session controller.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Input, RichLog

from .design_system import render_console_line
from .prompt_widget import InputHistory, merge_completions

CATEGORIES = ("console", "log", "result", "error", "system")


@dataclass(frozen=True)
class ConsoleLine:
    category: str
    text: str


class Scrollback:
    """Append-only line buffer that forgets its oldest lines past ``max_lines``."""

    def __init__(self, max_lines: int = 1000) -> None:
        if max_lines < 1:
            raise ValueError("max_lines must be at least 1")
        self._lines: deque[ConsoleLine] = deque(maxlen=max_lines)

    @property
    def max_lines(self) -> int:
        return self._lines.maxlen or 0

    def append(self, category: str, text: str) -> list[ConsoleLine]:
        """Split ``text`` on newlines and append each piece. Returns the new lines."""
        if category not in CATEGORIES:
            raise ValueError(f"Unknown console category: {category}")
        added = [ConsoleLine(category, line) for line in str(text).split("\n")]
        self._lines.extend(added)
        return added

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[ConsoleLine]:
        return iter(self._lines)


class ConsolePanel(Vertical):
    """Scrollback log above a single input line."""

    DEFAULT_CSS = """
    ConsolePanel {
        height: 1fr;
    }
    ConsolePanel #scrollback {
        height: 1fr;
        background: #010101;
        border: none;
        scrollbar-size-vertical: 1;
    }
    ConsolePanel #console_input {
        height: 3;
        border: tall #7c3aed;
        background: #050a12;
    }
    """

    BINDINGS = [
        Binding("tab", "complete", "Complete", show=False),
        Binding("up", "history_previous", "Previous", show=False),
        Binding("down", "history_next", "Next", show=False),
    ]

    class LineSubmitted(Message):
        """Posted when the user presses Enter."""

        def __init__(self, line: str) -> None:
            super().__init__()
            self.line = line

    def __init__(
        self,
        *,
        max_lines: int = 1000,
        history_size: int = 100,
        completer: Callable[[str], list[str]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.scrollback = Scrollback(max_lines)
        self.history = InputHistory(max_history=history_size)
        self.completer = completer

    def compose(self) -> ComposeResult:
        yield RichLog(
            id="scrollback",
            wrap=True,
            highlight=False,
            markup=False,
            max_lines=self.scrollback.max_lines,
        )
        yield Input(placeholder="Console expression, or /help", id="console_input")

    def on_mount(self) -> None:
        # Replay anything appended before the log existed.
        log = self.query_one("#scrollback", RichLog)
        for line in self.scrollback:
            log.write(render_console_line(line.category, line.text))

    def _input(self) -> Input:
        return self.query_one("#console_input", Input)

    def focus_input(self) -> None:
        self._input().focus()

    def add_lines(self, category: str, text: str) -> None:
        """Append one or more newline-separated lines tagged with ``category``."""
        added = self.scrollback.append(category, text)
        if not self.is_mounted:
            return
        log = self.query_one("#scrollback", RichLog)
        for line in added:
            log.write(render_console_line(line.category, line.text))

    def clear(self) -> None:
        self.scrollback.clear()
        if self.is_mounted:
            self.query_one("#scrollback", RichLog).clear()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        line = event.value
        event.input.value = ""
        self.history.add(line)
        self.post_message(self.LineSubmitted(line))

    def _set_input(self, value: str) -> None:
        chat_input = self._input()
        chat_input.value = value
        chat_input.cursor_position = len(value)

    def action_complete(self) -> None:
        if self.completer is None:
            return
        value = self._input().value
        new_value, options = merge_completions(value, self.completer(value))
        if new_value != value:
            self._set_input(new_value)
        if options:
            self.add_lines("system", "  ".join(options))

    def action_history_previous(self) -> None:
        previous = self.history.previous(self._input().value)
        if previous is not None:
            self._set_input(previous)

    def action_history_next(self) -> None:
        following = self.history.next()
        if following is not None:
            self._set_input(following)
