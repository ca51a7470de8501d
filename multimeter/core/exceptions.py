"""
Exceptions for Multimeter.

Every error carries optional details and a troubleshooting hint so the
console panel can show something useful without a traceback.
"""

from typing import Any


class MultimeterError(Exception):
    """Base class for all Multimeter errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}

    def get_troubleshooting_message(self) -> str:
        """Get troubleshooting guidance for this error."""
        return "Run with --verbose --log-file multimeter.log for detailed logs."


class ConfigurationError(MultimeterError):
    """Invalid or missing configuration."""

    def __init__(
        self,
        message: str,
        config_field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.config_field = config_field

    def get_troubleshooting_message(self) -> str:
        tips = [
            "Troubleshooting:",
            "  1. Check multimeter.yaml for syntax errors",
            "  2. Ensure field values are of the correct type",
        ]
        if self.config_field:
            tips.append(f"  3. Review the '{self.config_field}' field")
        return "\n".join(tips)


class AuthError(MultimeterError):
    """Authentication failed: bad credentials, rejected token or network failure."""

    def __init__(
        self,
        message: str,
        server: str | None = None,
        network: bool = False,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.server = server
        self.network = network

    def get_troubleshooting_message(self) -> str:
        tips = ["Troubleshooting:"]
        if self.network:
            tips.extend(
                [
                    "  1. Check your network connection",
                    "  2. Verify the server host and port",
                ]
            )
        else:
            tips.extend(
                [
                    "  1. Verify your email and password (or token)",
                    "  2. Official servers require an auth token: set SCREEPS_TOKEN",
                ]
            )
        return "\n".join(tips)


class HandshakeTimeout(MultimeterError):
    """The socket never acknowledged authentication."""

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.timeout_seconds = timeout_seconds

    def get_troubleshooting_message(self) -> str:
        tips = [
            "Troubleshooting:",
            "  1. The server did not answer 'auth ok' in time",
            "  2. Try increasing server.handshake_timeout",
        ]
        if self.timeout_seconds:
            tips.append(f"  3. Current timeout: {self.timeout_seconds:g} seconds")
        return "\n".join(tips)


class InvalidCommand(MultimeterError):
    """Unknown slash-command."""

    def __init__(self, name: str):
        super().__init__(f"Invalid command: {name}")
        self.name = name

    def get_troubleshooting_message(self) -> str:
        return "Type /help to list the available commands."


class TelemetryParseError(MultimeterError):
    """A telemetry reading is not a usable number."""


class AccountInfoFetchError(MultimeterError):
    """Fetching the account limits failed."""


class PayloadValidationError(MultimeterError):
    """A topic payload does not match its expected shape."""

    def __init__(
        self,
        message: str,
        topic: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.topic = topic


class ApiError(MultimeterError):
    """An HTTP API call failed."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


def format_error(error: MultimeterError, verbose: bool = False) -> str:
    """Format an error for display to the user.

    Args:
        error: The error to format
        verbose: Whether to include detailed information

    Returns:
        Formatted error message
    """
    lines = [f"Error: {error!s}"]

    if isinstance(error, AuthError) and error.server:
        lines.append(f"Server: {error.server}")
    elif isinstance(error, ApiError):
        if error.endpoint:
            lines.append(f"Endpoint: {error.endpoint}")
        if error.status_code:
            lines.append(f"Status: {error.status_code}")
    elif isinstance(error, ConfigurationError) and error.config_field:
        lines.append(f"Field: {error.config_field}")

    if verbose and error.details:
        lines.append("\nDetails:")
        for key, value in error.details.items():
            lines.append(f"  {key}: {value}")

    lines.append("")
    lines.append(error.get_troubleshooting_message())

    return "\n".join(lines)
