"""
Async client for the Screeps web API and its console socket.

HTTP calls go through ``httpx.AsyncClient``; the push stream is a raw
websocket on ``/socket/websocket`` that speaks a small line protocol:

    -> auth <token>
    <- auth ok <token>
    -> subscribe user:<id>/console
    <- ["user:<id>/console", {...}]

Data frames may be compressed as ``gz:`` + base64(zlib(json)).
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..core.config import Credentials, ServerConfig
from ..core.exceptions import AccountInfoFetchError, ApiError, AuthError, PayloadValidationError
from ..core.logging import get_logger
from .payloads import AccountInfo

logger = get_logger(__name__)

MAX_FRAME_BYTES = 10 * 1024 * 1024


def decode_frame(frame: str | bytes) -> tuple[str, Any] | None:
    """
    Decode one socket frame into ``(topic_path, data)``.

    Control frames (``time``, ``protocol``, ``auth`` ...) and undecodable
    frames return None.
    """
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Dropping non-UTF-8 frame")
            return None

    if frame.startswith("gz:"):
        try:
            frame = zlib.decompress(base64.b64decode(frame[3:])).decode("utf-8")
        except (binascii.Error, zlib.error, UnicodeDecodeError) as e:
            logger.warning(f"Dropping corrupt compressed frame: {e}")
            return None

    if not frame.startswith("["):
        return None

    try:
        message = json.loads(frame)
    except ValueError as e:
        logger.warning(f"Dropping malformed frame: {e}")
        return None

    if (
        not isinstance(message, list)
        or len(message) != 2
        or not isinstance(message[0], str)
    ):
        logger.warning(f"Dropping unexpected frame shape: {frame[:80]}")
        return None
    return message[0], message[1]


class ScreepsClient:
    """
    One authenticated connection to a Screeps server.

    Usage:

        client = ScreepsClient(server_config)
        await client.authenticate(credentials)
        await client.open_socket()
        await client.wait_for_handshake()
        await client.subscribe("console")
        async for topic_path, data in client.messages():
            ...
    """

    def __init__(
        self,
        server: ServerConfig,
        *,
        http: httpx.AsyncClient | None = None,
        connect: Callable[..., Any] | None = None,
    ):
        self.server = server
        self._http = http or httpx.AsyncClient(
            base_url=server.api_url, timeout=server.request_timeout
        )
        self._connect = connect or websockets.connect
        self._ws: Any | None = None
        self.token: str | None = None
        self.user_id: str | None = None
        self.username: str | None = None

    # ---- HTTP ----

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"X-Token": self.token, "X-Username": self.token}

    def _remember_token(self, response: httpx.Response) -> None:
        # The server rotates tokens on some responses.
        rotated = response.headers.get("X-Token")
        if rotated:
            self.token = rotated

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(
                method, endpoint, headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            raise ApiError(
                f"Request to {endpoint} failed: {e}",
                endpoint=endpoint,
                details={"error_type": type(e).__name__},
            ) from e

        self._remember_token(response)
        if response.status_code >= 400:
            raise ApiError(
                f"{endpoint} returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ApiError(f"{endpoint} returned invalid JSON", endpoint=endpoint) from e
        if not isinstance(data, dict):
            raise ApiError(f"{endpoint} returned an unexpected body", endpoint=endpoint)
        if "error" in data:
            raise ApiError(f"{endpoint}: {data['error']}", endpoint=endpoint)
        return data

    async def authenticate(self, credentials: Credentials) -> AccountInfo:
        """
        Sign in (or adopt a token) and resolve the account's user id.

        Raises:
            AuthError: On bad credentials, a rejected token or network failure
        """
        host = self.server.base_url
        if credentials.token:
            self.token = credentials.token
        elif credentials.email and credentials.password:
            logger.info(f"Signing in to {host} as {credentials.email}")
            try:
                data = await self._request(
                    "POST",
                    "auth/signin",
                    json={"email": credentials.email, "password": credentials.password},
                )
            except ApiError as e:
                raise AuthError(
                    "Not authorized" if e.status_code == 401 else str(e),
                    server=host,
                    network=e.status_code is None,
                ) from e
            token = data.get("token")
            if not isinstance(token, str) or not token:
                raise AuthError("Sign-in response carried no token", server=host)
            self.token = token
        else:
            raise AuthError("No credentials configured", server=host)

        try:
            info = AccountInfo.parse(await self._request("GET", "auth/me"))
        except ApiError as e:
            raise AuthError(
                "Token rejected" if e.status_code == 401 else str(e),
                server=host,
                network=e.status_code is None,
            ) from e
        except PayloadValidationError as e:
            raise AuthError(f"Unexpected account data: {e}", server=host) from e

        self.user_id = info.user_id
        self.username = info.username
        return info

    async def fetch_account_info(self) -> AccountInfo:
        """Fetch the account's limits. Raises AccountInfoFetchError."""
        try:
            return AccountInfo.parse(await self._request("GET", "auth/me"))
        except (ApiError, PayloadValidationError) as e:
            raise AccountInfoFetchError(f"Could not fetch account info: {e}") from e

    async def send_console_command(self, expression: str) -> None:
        """Run an expression in the server console. Raises ApiError."""
        body: dict[str, Any] = {"expression": expression}
        if self.server.shard:
            body["shard"] = self.server.shard
        await self._request("POST", "user/console", json=body)

    # ---- Socket ----

    async def open_socket(self) -> None:
        """Connect the socket and send the auth line."""
        if not self.token:
            raise AuthError("Cannot open socket before authenticating")
        try:
            self._ws = await self._connect(self.server.socket_url, max_size=MAX_FRAME_BYTES)
            await self._ws.send(f"auth {self.token}")
        except (OSError, WebSocketException) as e:
            raise AuthError(
                f"Socket connection failed: {e}", server=self.server.socket_url, network=True
            ) from e

    async def wait_for_handshake(self) -> None:
        """
        Read frames until the server acknowledges authentication.

        Callers bound this with a timeout; it returns only on ``auth ok``.
        """
        if self._ws is None:
            raise AuthError("Socket is not open")
        try:
            while True:
                frame = await self._ws.recv()
                if isinstance(frame, bytes):
                    frame = frame.decode("utf-8", errors="replace")
                if frame.startswith("auth ok"):
                    token = frame[len("auth ok") :].strip()
                    if token:
                        self.token = token
                    return
                if frame.startswith("auth failed"):
                    raise AuthError("Socket authentication failed", server=self.server.socket_url)
                logger.debug(f"Pre-handshake frame ignored: {frame[:40]}")
        except ConnectionClosed as e:
            raise AuthError(
                f"Socket closed during handshake: {e}",
                server=self.server.socket_url,
                network=True,
            ) from e

    def topic_path(self, topic: str) -> str:
        if topic.startswith("user:"):
            return topic
        return f"user:{self.user_id}/{topic.lstrip('/')}"

    async def subscribe(self, topic: str) -> None:
        if self._ws is None:
            raise AuthError("Socket is not open")
        path = self.topic_path(topic)
        logger.debug(f"Subscribing to {path}")
        try:
            await self._ws.send(f"subscribe {path}")
        except (OSError, WebSocketException) as e:
            raise ApiError(f"Subscribing to {path} failed: {e}", endpoint="socket") from e

    async def messages(self) -> AsyncIterator[tuple[str, Any]]:
        """Yield decoded ``(topic_path, data)`` pairs until the socket closes."""
        if self._ws is None:
            return
        try:
            async for frame in self._ws:
                decoded = decode_frame(frame)
                if decoded is not None:
                    yield decoded
        except ConnectionClosed as e:
            logger.info(f"Socket closed: {e}")
        except (OSError, WebSocketException) as e:
            logger.warning(f"Socket failed: {e}")

    async def close(self) -> None:
        if self._ws is not None:
            try:
                await self._ws.close()
            except (OSError, WebSocketException) as e:
                logger.debug(f"Ignoring error while closing socket: {e}")
            self._ws = None
        await self._http.aclose()
