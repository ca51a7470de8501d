"""Tests for topic payload parsing."""

import pytest

from multimeter.api.payloads import (
    AccountInfo,
    ConsoleMessage,
    CpuReading,
    is_number,
    split_topic_path,
)
from multimeter.core.exceptions import PayloadValidationError


@pytest.mark.parametrize(
    "path,expected",
    [
        ("user:abc/console", ("abc", "console")),
        ("user:abc/cpu", ("abc", "cpu")),
        ("console", (None, "console")),
        ("room:W1N1/x", (None, "x")),
    ],
)
def test_split_topic_path(path, expected):
    assert split_topic_path(path) == expected


@pytest.mark.parametrize("path", ["", None, 42])
def test_split_topic_path_rejects_non_paths(path):
    with pytest.raises(PayloadValidationError):
        split_topic_path(path)


@pytest.mark.parametrize(
    "value,expected",
    [(1, True), (2.5, True), ("3", True), (True, False), (None, False), (float("inf"), False)],
)
def test_is_number(value, expected):
    assert is_number(value) is expected


class TestConsoleMessage:
    def test_full_payload(self):
        message = ConsoleMessage.parse(
            {"messages": {"log": ["a", 1], "results": ["r"]}, "error": "E"}
        )

        assert message.log == ["a", "1"]
        assert message.results == ["r"]
        assert message.error == "E"

    def test_error_only_payload(self):
        message = ConsoleMessage.parse({"error": "SyntaxError"})

        assert message.log == []
        assert message.results == []
        assert message.error == "SyntaxError"

    @pytest.mark.parametrize(
        "data",
        [[], "x", {"messages": []}, {"messages": {"results": "r"}}],
    )
    def test_malformed_payloads_raise(self, data):
        with pytest.raises(PayloadValidationError) as exc_info:
            ConsoleMessage.parse(data)

        assert exc_info.value.topic in (None, "console")


class TestCpuReading:
    def test_keeps_values_as_sent(self):
        reading = CpuReading.parse({"cpu": "bad", "memory": 123})

        assert reading.cpu == "bad"
        assert reading.memory == 123

    def test_requires_a_reading(self):
        with pytest.raises(PayloadValidationError):
            CpuReading.parse({})


class TestAccountInfo:
    def test_parses_id_username_and_cpu(self):
        info = AccountInfo.parse({"_id": "u1", "username": "bob", "cpu": 30})

        assert info == AccountInfo(user_id="u1", username="bob", cpu=30)

    @pytest.mark.parametrize("cpu", [0, -1, "x", None])
    def test_unusable_cpu_becomes_none(self, cpu):
        assert AccountInfo.parse({"_id": "u1", "cpu": cpu}).cpu is None

    def test_requires_id(self):
        with pytest.raises(PayloadValidationError):
            AccountInfo.parse({"username": "bob"})
