"""Tests for command-line parsing and overrides."""

from pathlib import Path

import pytest

from multimeter import main as cli
from multimeter.core.config import ConfigManager, Credentials, MultimeterConfig, ServerConfig
from multimeter.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clear_credential_env(monkeypatch):
    for name in (ConfigManager.ENV_EMAIL, ConfigManager.ENV_PASSWORD, ConfigManager.ENV_TOKEN):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    "value,host,secure,port",
    [
        ("localhost", "localhost", True, None),
        ("localhost:21025", "localhost", True, 21025),
        ("http://127.0.0.1:21025", "127.0.0.1", False, 21025),
        ("https://screeps.com", "screeps.com", True, None),
    ],
)
def test_server_override(value, host, secure, port):
    server = ServerConfig()

    cli.apply_server_override(server, value)

    assert (server.host, server.secure, server.port) == (host, secure, port)


@pytest.mark.parametrize("value", ["ftp://host", "http://", "localhost:notaport"])
def test_invalid_server_override(value):
    with pytest.raises(ConfigurationError):
        cli.apply_server_override(ServerConfig(), value)


def test_flags_override_config():
    config = MultimeterConfig(credentials=Credentials(email="file@example.com"))
    args = cli.build_parser().parse_args(
        ["--email", "cli@example.com", "--token", "t", "--shard", "shard2"]
    )

    cli.apply_cli_overrides(config, args)

    assert config.credentials.email == "cli@example.com"
    assert config.credentials.token == "t"
    assert config.server.shard == "shard2"


def test_init_writes_config(tmp_path: Path):
    path = tmp_path / "multimeter.yaml"

    assert cli.main(["--init", "--config", str(path)]) == 0
    assert path.exists()
    assert cli.main(["--init", "--config", str(path)]) == 1


def test_bad_config_exits_with_status_1(tmp_path: Path):
    path = tmp_path / "multimeter.yaml"
    path.write_text("bogus:\n  key: 1\n", encoding="utf-8")

    assert cli.main(["--config", str(path)]) == 1


def test_runs_tui_with_resolved_credentials(tmp_path: Path, monkeypatch):
    launched = []
    monkeypatch.setattr(
        "multimeter.ui.run_textual_tui", lambda config, credentials: launched.append(credentials)
    )

    status = cli.main(["--config", str(tmp_path / "missing.yaml"), "--token", "tok"])

    assert status == 0
    assert launched == [Credentials(token="tok")]


def test_prompt_skipped_when_token_present(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not prompt")

    monkeypatch.setattr(cli.Prompt, "ask", fail)

    credentials = cli.prompt_for_credentials(Credentials(token="t"))

    assert credentials.token == "t"


def test_prompt_fills_missing_password(monkeypatch):
    monkeypatch.setattr(cli.Prompt, "ask", lambda *args, **kwargs: "secret")

    credentials = cli.prompt_for_credentials(Credentials(email="a@b.c"))

    assert credentials.password == "secret"
