"""
CPU and memory gauge strip.

The label and percentage math lives in ``compute_gauge_display`` so it can be
checked without a running app; ``GaugePanel`` only applies the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import ProgressBar, Static

from ..api.payloads import is_number
from ..core.exceptions import TelemetryParseError
from .design_system import GAUGE_LEVELS, get_gauge_level

CPU_ERROR_LABEL = "CPU: ERROR"
MEM_ERROR_LABEL = "Mem: ERROR"
ALARM_PERCENT = 100.0


@dataclass(frozen=True)
class GaugeDisplay:
    """What the gauge strip shows for one reading."""

    cpu_label: str
    cpu_percent: float
    cpu_error: bool
    mem_label: str
    mem_percent: float
    mem_error: bool


def _clamp(percent: float) -> float:
    return max(0.0, min(ALARM_PERCENT, percent))


def _reading(current: Any, limit: Any, name: str) -> tuple[float, float]:
    if not is_number(current):
        raise TelemetryParseError(f"{name} reading is not a number: {current!r}")
    if not is_number(limit) or float(limit) <= 0:
        raise TelemetryParseError(f"{name} limit is not positive: {limit!r}")
    return float(current), float(limit)


def compute_gauge_display(
    cpu_current: Any,
    cpu_limit: Any,
    mem_current: Any,
    mem_limit: Any,
    clamp: bool = False,
) -> GaugeDisplay:
    """
    Turn a raw reading into labels and bar percentages.

    A non-numeric current value, or a limit that is not positive, puts that
    gauge into the alarm state (error label, full bar) instead of dividing.
    """
    try:
        cpu, cpu_max = _reading(cpu_current, cpu_limit, "CPU")
    except TelemetryParseError:
        cpu_label, cpu_percent, cpu_error = CPU_ERROR_LABEL, ALARM_PERCENT, True
    else:
        cpu_label = f"CPU: {int(cpu):3d}/{int(cpu_max):3d}"
        cpu_percent = cpu / cpu_max * 100
        cpu_error = False

    try:
        mem, mem_max = _reading(mem_current, mem_limit, "Memory")
    except TelemetryParseError:
        mem_label, mem_percent, mem_error = MEM_ERROR_LABEL, ALARM_PERCENT, True
    else:
        mem_label = f"Mem: {int(mem / 1024):4d}K/{int(mem_max / 1024):4d}K"
        mem_percent = mem / mem_max * 100
        mem_error = False

    if clamp:
        cpu_percent = _clamp(cpu_percent)
        mem_percent = _clamp(mem_percent)

    return GaugeDisplay(
        cpu_label=cpu_label,
        cpu_percent=cpu_percent,
        cpu_error=cpu_error,
        mem_label=mem_label,
        mem_percent=mem_percent,
        mem_error=mem_error,
    )


class GaugePanel(Horizontal):
    """One-line strip with labeled CPU and memory bars."""

    DEFAULT_CSS = """
    GaugePanel {
        height: 1;
        background: #0d1117;
    }
    GaugePanel .gauge_label {
        width: 13;
        color: #f5f9ff;
        text-style: bold;
    }
    GaugePanel #mem_label {
        width: 17;
    }
    GaugePanel ProgressBar {
        width: 1fr;
        padding: 0 1 0 0;
    }
    GaugePanel ProgressBar > Horizontal {
        width: 1fr;
    }
    GaugePanel ProgressBar Bar {
        width: 1fr;
    }
    GaugePanel ProgressBar.-ok Bar > .bar--bar {
        color: #10b981;
    }
    GaugePanel ProgressBar.-warning Bar > .bar--bar {
        color: #f59e0b;
    }
    GaugePanel ProgressBar.-error Bar > .bar--bar {
        color: #f43f5e;
    }
    """

    def __init__(self, clamp_percentages: bool = False, **kwargs: Any):
        super().__init__(**kwargs)
        self.clamp_percentages = clamp_percentages
        self.last_display: GaugeDisplay | None = None

    def compose(self) -> ComposeResult:
        yield Static("CPU:    /   ", id="cpu_label", classes="gauge_label")
        yield ProgressBar(total=100, show_percentage=False, show_eta=False, id="cpu_bar")
        yield Static("Mem:     K/    K", id="mem_label", classes="gauge_label")
        yield ProgressBar(total=100, show_percentage=False, show_eta=False, id="mem_bar")

    def _apply_bar(self, bar_id: str, percent: float, error: bool) -> None:
        bar = self.query_one(f"#{bar_id}", ProgressBar)
        bar.update(progress=percent)
        level = get_gauge_level(percent, error)
        for name in GAUGE_LEVELS:
            bar.set_class(name == level, f"-{name}")

    def update(
        self, cpu_current: Any, cpu_limit: Any, mem_current: Any, mem_limit: Any
    ) -> GaugeDisplay:
        display = compute_gauge_display(
            cpu_current, cpu_limit, mem_current, mem_limit, clamp=self.clamp_percentages
        )
        self.last_display = display
        if not self.is_mounted:
            return display

        self.query_one("#cpu_label", Static).update(display.cpu_label)
        self.query_one("#mem_label", Static).update(display.mem_label)
        self._apply_bar("cpu_bar", display.cpu_percent, display.cpu_error)
        self._apply_bar("mem_bar", display.mem_percent, display.mem_error)
        self.refresh()
        return display
