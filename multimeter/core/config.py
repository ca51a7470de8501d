"""
Configuration management for Multimeter.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

DEFAULT_CPU_LIMIT = 1
DEFAULT_MEMORY_LIMIT = 2097152  # 2 MiB of Memory per player


@dataclass
class ServerConfig:
    """Where and how to reach the game server."""

    host: str = "screeps.com"
    secure: bool = True
    port: int | None = None
    shard: str | None = "shard0"
    handshake_timeout: float = 10.0
    request_timeout: float = 15.0

    @property
    def base_url(self) -> str:
        scheme = "https" if self.secure else "http"
        port = f":{self.port}" if self.port else ""
        return f"{scheme}://{self.host}{port}"

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api/"

    @property
    def socket_url(self) -> str:
        scheme = "wss" if self.secure else "ws"
        port = f":{self.port}" if self.port else ""
        return f"{scheme}://{self.host}{port}/socket/websocket"


@dataclass
class Credentials:
    """Login credentials. A token skips the email/password sign-in."""

    email: str | None = None
    password: str | None = None
    token: str | None = None

    def is_complete(self) -> bool:
        return bool(self.token) or bool(self.email and self.password)

    def __repr__(self) -> str:
        # Never leak secrets into logs.
        return (
            f"Credentials(email={self.email!r}, "
            f"password={'***' if self.password else None}, "
            f"token={'***' if self.token else None})"
        )


@dataclass
class ConsoleConfig:
    """Console panel behavior."""

    max_lines: int = 1000
    history_size: int = 100


@dataclass
class GaugeConfig:
    """Gauge panel behavior."""

    clamp_percentages: bool = False
    default_cpu_limit: int = DEFAULT_CPU_LIMIT
    default_memory_limit: int = DEFAULT_MEMORY_LIMIT


@dataclass
class MultimeterConfig:
    """Main configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    credentials: Credentials = field(default_factory=Credentials)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    gauges: GaugeConfig = field(default_factory=GaugeConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "MultimeterConfig":
        """Build a config from parsed YAML/JSON, rejecting unknown keys."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        sections = {
            "server": ServerConfig,
            "credentials": Credentials,
            "console": ConsoleConfig,
            "gauges": GaugeConfig,
        }
        unknown = set(data) - set(sections)
        if unknown:
            name = sorted(unknown)[0]
            raise ConfigurationError(f"Unknown configuration section: {name}", config_field=name)

        kwargs: dict[str, Any] = {}
        for name, section_cls in sections.items():
            section_data = data.get(name) or {}
            if not isinstance(section_data, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping", config_field=name)
            allowed = {f.name for f in fields(section_cls)}
            for key in section_data:
                if key not in allowed:
                    raise ConfigurationError(
                        f"Unknown configuration key: {name}.{key}",
                        config_field=f"{name}.{key}",
                    )
            kwargs[name] = section_cls(**section_data)

        config = cls(**kwargs)
        config.validate()
        return config

    def validate(self) -> None:
        """Check value ranges."""
        if self.server.handshake_timeout <= 0:
            raise ConfigurationError(
                "handshake_timeout must be positive", config_field="server.handshake_timeout"
            )
        if self.server.request_timeout <= 0:
            raise ConfigurationError(
                "request_timeout must be positive", config_field="server.request_timeout"
            )
        if self.console.max_lines < 1:
            raise ConfigurationError(
                "max_lines must be at least 1", config_field="console.max_lines"
            )
        if self.gauges.default_cpu_limit <= 0:
            raise ConfigurationError(
                "default_cpu_limit must be positive", config_field="gauges.default_cpu_limit"
            )
        if self.gauges.default_memory_limit <= 0:
            raise ConfigurationError(
                "default_memory_limit must be positive",
                config_field="gauges.default_memory_limit",
            )

    @classmethod
    def load_from_file(cls, config_path: Path) -> "MultimeterConfig":
        """Load configuration from file."""
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                if config_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

        try:
            return cls.from_dict(data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


MINIMAL_CONFIG = """# Multimeter configuration
#
# Credentials are best kept in the environment:
#   SCREEPS_TOKEN=...            (official server)
#   SCREEPS_EMAIL / SCREEPS_PASSWORD   (private servers with screepsmod-auth)

server:
  host: screeps.com
  secure: true
  port: null
  shard: shard0
  handshake_timeout: 10.0
  request_timeout: 15.0

credentials:
  email: null

console:
  max_lines: 1000
  history_size: 100

gauges:
  # Keep bars inside 0..100 instead of showing overshoot
  clamp_percentages: false
"""


class ConfigManager:
    """Locates, loads and writes the configuration file."""

    CONFIG_FILENAME = "multimeter.yaml"

    ENV_EMAIL = "SCREEPS_EMAIL"
    ENV_PASSWORD = "SCREEPS_PASSWORD"
    ENV_TOKEN = "SCREEPS_TOKEN"

    def __init__(self, config_path: Path | None = None, project_root: Path | None = None):
        self.project_root = project_root or Path.cwd()
        self.config_path = config_path or self.project_root / self.CONFIG_FILENAME
        self._config: MultimeterConfig | None = None

    @property
    def config(self) -> MultimeterConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> MultimeterConfig:
        """Load configuration from file, then apply environment overrides."""
        if self.config_path.exists():
            self._config = MultimeterConfig.load_from_file(self.config_path)
        else:
            self._config = MultimeterConfig()

        self._apply_env_overrides(self._config.credentials)
        return self._config

    def _apply_env_overrides(self, credentials: Credentials) -> None:
        email = os.getenv(self.ENV_EMAIL)
        password = os.getenv(self.ENV_PASSWORD)
        token = os.getenv(self.ENV_TOKEN)
        if email:
            credentials.email = email
        if password:
            credentials.password = password
        if token:
            credentials.token = token

    def write_minimal_config(self, overwrite: bool = False) -> Path:
        """Write a commented starter configuration file."""
        if self.config_path.exists() and not overwrite:
            raise ConfigurationError(f"Configuration file already exists: {self.config_path}")
        try:
            self.config_path.write_text(MINIMAL_CONFIG)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e
        return self.config_path
