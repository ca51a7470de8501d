"""
Input-line helpers for the console panel: submitted-line history and
tab-completion merging.
"""

from __future__ import annotations

import os


class InputHistory:
    """Up/down navigation over previously submitted lines.

    Usage:

        history = InputHistory(max_history=100)
        history.add("Game.time")

        # On arrow up / down:
        previous_text = history.previous(current_text)
        next_text = history.next()
    """

    def __init__(self, max_history: int = 100) -> None:
        self._history: list[str] = []
        self._index: int = -1
        self._stash: str = ""  # In-progress input saved before navigating
        self._max_history = max_history

    def __len__(self) -> int:
        return len(self._history)

    def add(self, text: str) -> None:
        """Record a submitted line."""
        if not text.strip():
            return
        self._index = -1
        self._stash = ""
        # Deduplicate: skip if identical to the newest entry.
        if self._history and self._history[-1] == text:
            return
        self._history.append(text)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history :]

    def previous(self, current_text: str = "") -> str | None:
        """Step back in history. Returns the older line or None."""
        if not self._history:
            return None

        if self._index == -1:
            self._stash = current_text
            self._index = len(self._history) - 1
        elif self._index > 0:
            self._index -= 1
        else:
            return None  # Already at oldest entry

        return self._history[self._index]

    def next(self) -> str | None:
        """Step forward in history. Returns the newer line, the stash, or None."""
        if self._index == -1:
            return None

        if self._index < len(self._history) - 1:
            self._index += 1
            return self._history[self._index]

        self._index = -1
        return self._stash


def merge_completions(value: str, matches: list[str]) -> tuple[str, list[str]]:
    """
    Decide what Tab does with a list of candidates.

    Returns the new input value and the candidates to list for the user
    (empty when the input was completed unambiguously).
    """
    if not matches:
        return value, []
    if len(matches) == 1:
        return matches[0], []

    common = os.path.commonprefix(matches)
    if len(common) > len(value):
        return common, list(matches)
    return value, list(matches)
