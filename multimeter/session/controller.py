"""
Session controller: connection lifecycle, topic routing and command dispatch.

Everything here runs on the application's event loop. Socket messages and
submitted lines are handled one at a time, so session state needs no locks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from ..api.client import ScreepsClient
from ..api.payloads import (
    SUBSCRIBED_TOPICS,
    TOPIC_CODE,
    TOPIC_CONSOLE,
    TOPIC_CPU,
    CodeNotice,
    ConsoleMessage,
    CpuReading,
    split_topic_path,
)
from ..core.config import (
    DEFAULT_CPU_LIMIT,
    DEFAULT_MEMORY_LIMIT,
    Credentials,
    GaugeConfig,
    ServerConfig,
)
from ..core.exceptions import (
    AccountInfoFetchError,
    ApiError,
    HandshakeTimeout,
    InvalidCommand,
    MultimeterError,
    PayloadValidationError,
)
from ..core.logging import get_logger
from .commands import COMMAND_MARKER, CommandEntry

logger = get_logger(__name__)

MOTD = "Now showing Screeps console. Type /help for help."
CODE_UPDATED = "Code updated"


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    AUTHENTICATING = "authenticating"
    AWAITING_HANDSHAKE = "awaiting handshake"
    SUBSCRIBING = "subscribing"
    ACTIVE = "active"


@dataclass
class Session:
    """The one live (or pending) connection and what the server told us about it."""

    credentials: Credentials = field(default_factory=Credentials)
    state: SessionState = SessionState.DISCONNECTED
    cpu_limit: int = DEFAULT_CPU_LIMIT
    memory_limit: int = DEFAULT_MEMORY_LIMIT
    user_id: str | None = None
    username: str | None = None

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE


class ConsoleSink(Protocol):
    def add_lines(self, category: str, text: str) -> None: ...

    def clear(self) -> None: ...


class GaugeSink(Protocol):
    def update(self, cpu_current: Any, cpu_limit: Any, mem_current: Any, mem_limit: Any) -> None: ...


class SessionController:
    """
    Drives a ScreepsClient and feeds the console and gauge panels.

    The controller knows nothing about Textual: the panels are passed in as
    plain objects with ``add_lines``/``clear`` and ``update`` methods.
    """

    def __init__(
        self,
        console: ConsoleSink,
        gauges: GaugeSink,
        commands: Mapping[str, CommandEntry],
        *,
        server: ServerConfig | None = None,
        gauge_config: GaugeConfig | None = None,
        client_factory: Callable[[ServerConfig], ScreepsClient] = ScreepsClient,
        on_exit: Callable[[], None] | None = None,
    ):
        self.console = console
        self.gauges = gauges
        self.commands = commands
        self.server = server or ServerConfig()
        self.gauge_config = gauge_config or GaugeConfig()
        self._client_factory = client_factory
        self._on_exit = on_exit
        self.client: ScreepsClient | None = None
        self.session = self._new_session(Credentials())
        self._limits_task: asyncio.Task[None] | None = None
        self._routes: dict[str, Callable[[str | None, Any], None]] = {
            TOPIC_CONSOLE: self._route_console,
            TOPIC_CPU: self._route_cpu,
            TOPIC_CODE: self._route_code,
        }

    def _new_session(self, credentials: Credentials) -> Session:
        return Session(
            credentials=credentials,
            cpu_limit=self.gauge_config.default_cpu_limit,
            memory_limit=self.gauge_config.default_memory_limit,
        )

    def _set_state(self, state: SessionState) -> None:
        logger.debug(f"Session state: {self.session.state.value} -> {state.value}")
        self.session.state = state

    # ---- Lifecycle ----

    async def connect(self, credentials: Credentials) -> Session:
        """
        Authenticate, complete the socket handshake and subscribe.

        Raises:
            AuthError: Bad credentials or network failure
            HandshakeTimeout: The socket never acknowledged authentication
        """
        if self.client is not None:
            await self._disconnect()

        self.session = self._new_session(credentials)
        client = self._client_factory(self.server)
        self.client = client
        who = credentials.email or "token"
        self.console.add_lines("system", f"Connecting to Screeps as {who}...")

        try:
            self._set_state(SessionState.AUTHENTICATING)
            info = await client.authenticate(credentials)
            self.session.user_id = info.user_id
            self.session.username = info.username

            self._set_state(SessionState.AWAITING_HANDSHAKE)
            await client.open_socket()
            timeout = self.server.handshake_timeout
            try:
                await asyncio.wait_for(client.wait_for_handshake(), timeout=timeout)
            except asyncio.TimeoutError as e:
                raise HandshakeTimeout(
                    f"No handshake acknowledgment within {timeout:g}s",
                    timeout_seconds=timeout,
                ) from e

            self._set_state(SessionState.SUBSCRIBING)
            for topic in SUBSCRIBED_TOPICS:
                await client.subscribe(topic)
        except MultimeterError:
            await self._disconnect()
            raise

        self._set_state(SessionState.ACTIVE)
        self._limits_task = asyncio.create_task(self._fetch_limits(client))
        logger.info(f"Session active for user {self.session.user_id}")
        return self.session

    async def _fetch_limits(self, client: ScreepsClient) -> None:
        try:
            info = await client.fetch_account_info()
        except AccountInfoFetchError as e:
            logger.info(f"Keeping default limits: {e}")
            return
        if info.cpu:
            self.session.cpu_limit = info.cpu
            logger.debug(f"CPU limit set to {info.cpu}")

    async def run(self, credentials: Credentials) -> None:
        """Connect, then route socket messages until the connection ends."""
        try:
            await self.connect(credentials)
        except MultimeterError as e:
            logger.warning(f"Connection failed: {e}")
            self.console.add_lines("error", str(e))
            self.console.add_lines("system", e.get_troubleshooting_message())
            return

        self.console.add_lines("system", MOTD)
        client = self.client
        async for topic_path, data in client.messages():
            self.route_message(topic_path, data)

        if self.client is client and self.session.active:
            self.console.add_lines("system", "Connection closed by server.")
            await self._disconnect()

    async def _disconnect(self) -> None:
        if self._limits_task is not None:
            self._limits_task.cancel()
            self._limits_task = None
        client, self.client = self.client, None
        self._set_state(SessionState.DISCONNECTED)
        if client is not None:
            await client.close()

    async def close(self) -> None:
        await self._disconnect()

    def request_exit(self) -> None:
        logger.info("Exit requested")
        if self._on_exit is not None:
            self._on_exit()

    # ---- Routing ----

    def route_message(self, topic: str, payload: Any) -> None:
        """
        Dispatch one pushed message by topic name.

        ``topic`` is the full path (``user:<id>/console``). Malformed payloads
        and unknown topics are logged and dropped.
        """
        try:
            user_id, name = split_topic_path(topic)
        except PayloadValidationError as e:
            logger.warning(str(e))
            return

        route = self._routes.get(name)
        if route is None:
            logger.debug(f"Ignoring message on unrouted topic {topic}")
            return
        try:
            route(user_id, payload)
        except PayloadValidationError as e:
            logger.warning(f"Dropping malformed {name} payload: {e}")

    def _route_console(self, user_id: str | None, data: Any) -> None:
        message = ConsoleMessage.parse(data)
        for line in message.log:
            self.console.add_lines("log", line)
        for line in message.results:
            self.console.add_lines("result", line)
        if message.error:
            self.console.add_lines("error", message.error)

    def _route_cpu(self, user_id: str | None, data: Any) -> None:
        reading = CpuReading.parse(data)
        self.gauges.update(
            reading.cpu, self.session.cpu_limit, reading.memory, self.session.memory_limit
        )

    def _route_code(self, user_id: str | None, data: Any) -> None:
        CodeNotice.parse(data)
        self.console.add_lines("system", CODE_UPDATED)

    # ---- Input ----

    def dispatch_command(self, line: str) -> None:
        """
        Run a marker-prefixed line as a local command.

        Raises:
            InvalidCommand: If the first token names no registered command
        """
        parts = line[len(COMMAND_MARKER) :].split()
        name = parts[0] if parts else ""
        entry = self.commands.get(name)
        if entry is None:
            raise InvalidCommand(name)
        logger.debug(f"Running command /{name} {parts[1:]}")
        entry.handler(self, parts[1:])

    async def submit(self, line: str) -> None:
        """Handle one line typed by the user."""
        if line.startswith(COMMAND_MARKER):
            try:
                self.dispatch_command(line)
            except InvalidCommand as e:
                self.console.add_lines("system", str(e))
            return

        if not line:
            return

        self.console.add_lines("console", line)
        client = self.client
        if client is None or not self.session.active:
            return
        try:
            await client.send_console_command(line)
        except ApiError as e:
            logger.warning(f"Console command failed: {e}")
            self.console.add_lines("error", f"Console command failed: {e}")

    def complete(self, partial: str) -> list[str]:
        """Slash-command completions for ``partial``, in registration order."""
        if not partial.startswith(COMMAND_MARKER):
            return []
        prefix = partial[len(COMMAND_MARKER) :].lower()
        return [
            f"{COMMAND_MARKER}{name}"
            for name in self.commands
            if name.lower().startswith(prefix)
        ]

