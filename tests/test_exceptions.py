"""Tests for error messages and troubleshooting hints."""

from multimeter.core.exceptions import (
    ApiError,
    AuthError,
    ConfigurationError,
    HandshakeTimeout,
    InvalidCommand,
    MultimeterError,
    format_error,
)


def test_invalid_command_names_the_token():
    error = InvalidCommand("frobnicate")

    assert str(error) == "Invalid command: frobnicate"
    assert "/help" in error.get_troubleshooting_message()


def test_auth_error_hints_depend_on_cause():
    network = AuthError("refused", network=True).get_troubleshooting_message()
    credentials = AuthError("Not authorized").get_troubleshooting_message()

    assert "network" in network
    assert "SCREEPS_TOKEN" in credentials


def test_handshake_timeout_mentions_setting():
    message = HandshakeTimeout("late", timeout_seconds=10.0).get_troubleshooting_message()

    assert "handshake_timeout" in message
    assert "10 seconds" in message


def test_format_error_adds_context():
    api = format_error(ApiError("failed", endpoint="user/console", status_code=502))
    config = format_error(ConfigurationError("bad", config_field="server.port"))

    assert api.splitlines()[:3] == ["Error: failed", "Endpoint: user/console", "Status: 502"]
    assert "Troubleshooting" not in api.splitlines()[0]
    assert "Field: server.port" in config


def test_format_error_verbose_includes_details():
    error = MultimeterError("boom", details={"attempt": 2})

    assert "attempt: 2" in format_error(error, verbose=True)
    assert "attempt" not in format_error(error)
