"""
Core functionality for Multimeter.
"""

from .config import (
    ConfigManager,
    ConsoleConfig,
    Credentials,
    GaugeConfig,
    MultimeterConfig,
    ServerConfig,
)
from .exceptions import (
    AccountInfoFetchError,
    ApiError,
    AuthError,
    ConfigurationError,
    HandshakeTimeout,
    InvalidCommand,
    MultimeterError,
    PayloadValidationError,
    TelemetryParseError,
    format_error,
)
from .logging import get_logger, setup_logging

__all__ = [
    "AccountInfoFetchError",
    "ApiError",
    "AuthError",
    "ConfigManager",
    "ConfigurationError",
    "ConsoleConfig",
    "Credentials",
    "GaugeConfig",
    "HandshakeTimeout",
    "InvalidCommand",
    "MultimeterConfig",
    "MultimeterError",
    "PayloadValidationError",
    "ServerConfig",
    "TelemetryParseError",
    "format_error",
    "get_logger",
    "setup_logging",
]
