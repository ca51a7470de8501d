"""
Textual application: gauge strip on top, console panel below.
"""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding

from ..core.config import Credentials, MultimeterConfig
from ..core.logging import get_logger
from ..session.commands import build_command_table
from ..session.controller import SessionController
from .console_panel import ConsolePanel
from .gauges import GaugePanel

logger = get_logger(__name__)


class MultimeterApp(App):
    """Screeps console and CPU/memory monitor."""

    TITLE = "Multimeter"

    CSS = """
    Screen {
      layout: vertical;
      background: #010101;
    }
    #gauges {
      dock: top;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit_app", "Quit"),
        Binding("ctrl+c", "quit_app", "Quit", show=False, priority=True),
        Binding("ctrl+l", "clear_console", "Clear", show=False),
    ]

    def __init__(self, config: MultimeterConfig, credentials: Credentials | None = None):
        super().__init__()
        self.config = config
        self.credentials = credentials or config.credentials
        self.controller: SessionController | None = None

    def compose(self) -> ComposeResult:
        yield GaugePanel(clamp_percentages=self.config.gauges.clamp_percentages, id="gauges")
        yield ConsolePanel(
            max_lines=self.config.console.max_lines,
            history_size=self.config.console.history_size,
            id="console",
        )

    def on_mount(self) -> None:
        console = self.query_one("#console", ConsolePanel)
        gauges = self.query_one("#gauges", GaugePanel)
        self.controller = SessionController(
            console,
            gauges,
            build_command_table(),
            server=self.config.server,
            gauge_config=self.config.gauges,
            on_exit=self.exit,
        )
        console.completer = self.controller.complete
        console.focus_input()
        self.run_worker(
            self.controller.run(self.credentials),
            name="session",
            group="session",
            exclusive=True,
        )

    async def on_console_panel_line_submitted(self, event: ConsolePanel.LineSubmitted) -> None:
        if self.controller is not None:
            await self.controller.submit(event.line)

    def action_clear_console(self) -> None:
        self.query_one("#console", ConsolePanel).clear()

    def action_quit_app(self) -> None:
        if self.controller is not None:
            self.controller.request_exit()
        else:
            self.exit()

    async def on_unmount(self) -> None:
        if self.controller is not None:
            await self.controller.close()


def run_textual_tui(config: MultimeterConfig, credentials: Credentials | None = None) -> None:
    """Launch the Textual TUI and block until it exits."""
    logger.info(f"Starting TUI against {config.server.base_url}")
    MultimeterApp(config, credentials).run()
