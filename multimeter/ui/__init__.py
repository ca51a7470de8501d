"""
Terminal UI for Multimeter.
"""

from .design_system import PALETTE, render_console_line
from .prompt_widget import InputHistory, merge_completions


def run_textual_tui(*args, **kwargs):
    """
    Lazily import and launch the Textual TUI.

    Keeps the pure helpers importable without building any widgets.
    """
    from .tui_app import run_textual_tui as _run_textual_tui

    return _run_textual_tui(*args, **kwargs)


__all__ = [
    "PALETTE",
    "InputHistory",
    "merge_completions",
    "render_console_line",
    "run_textual_tui",
]
