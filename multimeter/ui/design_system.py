"""
Colors, icons and render helpers shared by the Multimeter widgets.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

# ---------------------------------------------------------------------------
# Color Palette
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColorPalette:
    """Semantic color tokens."""

    # ---- background layers ----
    bg_base: str = "#010101"
    bg_surface: str = "#0d1117"
    bg_header: str = "#050a12"

    # ---- primary ----
    primary: str = "#7c3aed"
    primary_light: str = "#9d5cff"

    # ---- accent ----
    accent: str = "#5a89b8"
    accent_bright: str = "#90edff"

    # ---- semantic status ----
    success: str = "#10b981"
    warning: str = "#f59e0b"
    error: str = "#f43f5e"
    info: str = "#06b6d4"

    # ---- text ----
    text_primary: str = "#f5f9ff"
    text_body: str = "#e2ecf8"
    text_muted: str = "#b7d0ea"
    text_dim: str = "#9bb3cb"
    text_ghost: str = "#52525b"


PALETTE = ColorPalette()


# ---------------------------------------------------------------------------
# Console categories
# ---------------------------------------------------------------------------

CATEGORY_STYLES = {
    "console": f"bold {PALETTE.accent_bright}",
    "log": PALETTE.text_body,
    "result": PALETTE.success,
    "error": f"bold {PALETTE.error}",
    "system": f"italic {PALETTE.warning}",
}

CATEGORY_PREFIXES = {
    "console": "< ",
    "log": "",
    "result": "> ",
    "error": "! ",
    "system": "* ",
}


# ---------------------------------------------------------------------------
# Render Helpers
# ---------------------------------------------------------------------------


def render_console_line(category: str, text: str) -> Text:
    """Render one scrollback line in its category style."""
    style = CATEGORY_STYLES.get(category, PALETTE.text_body)
    result = Text()
    prefix = CATEGORY_PREFIXES.get(category, "")
    if prefix:
        result.append(prefix, style=PALETTE.text_ghost)
    result.append(text, style=style)
    return result


GAUGE_LEVELS = ("ok", "warning", "error")


def get_gauge_level(percentage: float, error: bool = False) -> str:
    """Severity level of a bar, used as its CSS class suffix."""
    if error or percentage >= 90:
        return "error"
    if percentage >= 70:
        return "warning"
    return "ok"
