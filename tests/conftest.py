"""
Pytest configuration and fixtures for Multimeter tests.
"""

import asyncio
import os

import pytest
from hypothesis import Verbosity, settings

from multimeter.api.payloads import AccountInfo
from multimeter.core.config import ServerConfig
from multimeter.core.exceptions import ApiError
from multimeter.session.commands import build_command_table
from multimeter.session.controller import SessionController

# Configure hypothesis settings for property-based testing
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,  # Disable deadline for slow operations
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


class FakeConsole:
    """Records what the controller writes, one entry per line."""

    def __init__(self):
        self.lines: list[tuple[str, str]] = []
        self.clear_count = 0

    def add_lines(self, category: str, text: str) -> None:
        for line in text.split("\n"):
            self.lines.append((category, line))

    def clear(self) -> None:
        self.lines.clear()
        self.clear_count += 1

    def of(self, category: str) -> list[str]:
        return [text for cat, text in self.lines if cat == category]


class FakeGauges:
    def __init__(self):
        self.updates: list[tuple] = []

    def update(self, cpu_current, cpu_limit, mem_current, mem_limit) -> None:
        self.updates.append((cpu_current, cpu_limit, mem_current, mem_limit))


class FakeClient:
    """Stands in for ScreepsClient with scripted outcomes."""

    def __init__(
        self,
        server: ServerConfig,
        *,
        user_id: str = "u1",
        cpu: int | None = 100,
        auth_error: Exception | None = None,
        hang_handshake: bool = False,
        frames: list[tuple[str, object]] | None = None,
        console_error: Exception | None = None,
        limits_error: Exception | None = None,
    ):
        self.server = server
        self.user_id = user_id
        self.cpu = cpu
        self.auth_error = auth_error
        self.hang_handshake = hang_handshake
        self.frames = frames or []
        self.console_error = console_error
        self.limits_error = limits_error
        self.sent: list[str] = []
        self.subscribed: list[str] = []
        self.socket_opened = False
        self.closed = False

    async def authenticate(self, credentials):
        if self.auth_error is not None:
            raise self.auth_error
        return AccountInfo(user_id=self.user_id, username="tester")

    async def open_socket(self):
        self.socket_opened = True

    async def wait_for_handshake(self):
        if self.hang_handshake:
            await asyncio.Event().wait()

    async def subscribe(self, topic):
        self.subscribed.append(topic)

    async def fetch_account_info(self):
        if self.limits_error is not None:
            raise self.limits_error
        return AccountInfo(user_id=self.user_id, username="tester", cpu=self.cpu)

    async def send_console_command(self, expression):
        if self.console_error is not None:
            raise self.console_error
        self.sent.append(expression)

    async def messages(self):
        for frame in self.frames:
            yield frame

    async def close(self):
        self.closed = True


@pytest.fixture
def console():
    return FakeConsole()


@pytest.fixture
def gauges():
    return FakeGauges()


@pytest.fixture
def make_controller(console, gauges):
    """Build a controller whose client factory returns a configured FakeClient."""

    def _make(**client_kwargs):
        clients: list[FakeClient] = []

        def factory(server):
            client = FakeClient(server, **client_kwargs)
            clients.append(client)
            return client

        exits: list[bool] = []
        controller = SessionController(
            console,
            gauges,
            build_command_table(),
            server=ServerConfig(handshake_timeout=0.05),
            client_factory=factory,
            on_exit=lambda: exits.append(True),
        )
        controller.fake_clients = clients
        controller.exit_calls = exits
        return controller

    return _make


@pytest.fixture
def api_error():
    return ApiError("user/console returned HTTP 500", endpoint="user/console", status_code=500)
