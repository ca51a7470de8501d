"""
Screeps server API: HTTP + console socket client and payload schemas.
"""

from .client import ScreepsClient, decode_frame
from .payloads import (
    SUBSCRIBED_TOPICS,
    TOPIC_CODE,
    TOPIC_CONSOLE,
    TOPIC_CPU,
    AccountInfo,
    CodeNotice,
    ConsoleMessage,
    CpuReading,
    split_topic_path,
)

__all__ = [
    "SUBSCRIBED_TOPICS",
    "TOPIC_CODE",
    "TOPIC_CONSOLE",
    "TOPIC_CPU",
    "AccountInfo",
    "CodeNotice",
    "ConsoleMessage",
    "CpuReading",
    "ScreepsClient",
    "decode_frame",
    "split_topic_path",
]
