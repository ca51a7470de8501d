"""
Typed views of the payloads pushed on each subscribed topic.

Server payloads are loosely structured JSON. Each topic gets a dataclass with
a ``parse`` classmethod that either returns a well-formed instance or raises
PayloadValidationError, so routing code never touches raw dictionaries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from ..core.exceptions import PayloadValidationError

TOPIC_CONSOLE = "console"
TOPIC_CPU = "cpu"
TOPIC_CODE = "code"

SUBSCRIBED_TOPICS = (TOPIC_CONSOLE, TOPIC_CPU, TOPIC_CODE)


def split_topic_path(path: str) -> tuple[str | None, str]:
    """
    Split ``user:<id>/<topic>`` into ``(user_id, topic)``.

    Paths without a ``user:`` owner yield ``(None, topic)``.
    """
    if not isinstance(path, str) or not path:
        raise PayloadValidationError(f"Invalid topic path: {path!r}")
    owner, sep, topic = path.rpartition("/")
    if not sep:
        return None, path
    user_id = owner[len("user:") :] if owner.startswith("user:") else None
    return user_id or None, topic


def is_number(value: Any) -> bool:
    """True for real ints/floats (and numeric strings), never bool or NaN."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not math.isnan(value) and not math.isinf(value)
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return False
        return not math.isnan(parsed) and not math.isinf(parsed)
    return False


def _text_list(value: Any, name: str, topic: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise PayloadValidationError(f"'{name}' must be a list", topic=topic)
    return [item if isinstance(item, str) else str(item) for item in value]


@dataclass(frozen=True)
class ConsoleMessage:
    """A batch of console output from one game tick."""

    log: list[str] = field(default_factory=list)
    results: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def parse(cls, data: Any) -> ConsoleMessage:
        if not isinstance(data, dict):
            raise PayloadValidationError("console payload must be an object", topic=TOPIC_CONSOLE)

        log: list[str] = []
        results: list[str] = []
        messages = data.get("messages")
        if messages is not None:
            if not isinstance(messages, dict):
                raise PayloadValidationError("'messages' must be an object", topic=TOPIC_CONSOLE)
            log = _text_list(messages.get("log"), "messages.log", TOPIC_CONSOLE)
            results = _text_list(messages.get("results"), "messages.results", TOPIC_CONSOLE)

        error = data.get("error")
        if error is not None and not isinstance(error, str):
            error = str(error)
        return cls(log=log, results=results, error=error or None)


@dataclass(frozen=True)
class CpuReading:
    """
    A CPU/memory telemetry sample.

    ``cpu`` is kept as sent: a non-numeric value is a display concern for the
    gauge panel, not a reason to drop the sample.
    """

    cpu: Any
    memory: Any

    @classmethod
    def parse(cls, data: Any) -> CpuReading:
        if not isinstance(data, dict):
            raise PayloadValidationError("cpu payload must be an object", topic=TOPIC_CPU)
        if "cpu" not in data and "memory" not in data:
            raise PayloadValidationError("cpu payload has no readings", topic=TOPIC_CPU)
        return cls(cpu=data.get("cpu"), memory=data.get("memory"))


@dataclass(frozen=True)
class CodeNotice:
    """Code-update notification. The content is never shown."""

    @classmethod
    def parse(cls, data: Any) -> CodeNotice:
        return cls()


@dataclass(frozen=True)
class AccountInfo:
    """The subset of ``auth/me`` used here."""

    user_id: str
    username: str | None = None
    cpu: int | None = None

    @classmethod
    def parse(cls, data: Any) -> AccountInfo:
        if not isinstance(data, dict):
            raise PayloadValidationError("account payload must be an object")
        user_id = data.get("_id")
        if not isinstance(user_id, str) or not user_id:
            raise PayloadValidationError("account payload has no '_id'")
        cpu = data.get("cpu")
        if not is_number(cpu) or float(cpu) <= 0:
            cpu = None
        else:
            cpu = int(float(cpu))
        username = data.get("username")
        return cls(
            user_id=user_id,
            username=username if isinstance(username, str) else None,
            cpu=cpu,
        )
