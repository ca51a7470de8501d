"""
Command-line entry point for Multimeter.
"""

import argparse
import sys
from pathlib import Path
from urllib.parse import urlsplit

from rich.console import Console
from rich.prompt import Prompt

from . import __version__
from .core.config import ConfigManager, Credentials, MultimeterConfig, ServerConfig
from .core.exceptions import ConfigurationError, MultimeterError, format_error
from .core.logging import get_logger, setup_logging

console = Console(stderr=True)
logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multimeter",
        description="Multimeter: Screeps console and CPU/memory monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write a starter multimeter.yaml in the current directory
  multimeter --init

  # Connect to the official server with an auth token
  multimeter --token 0123abcd --shard shard3

  # Connect to a private server
  multimeter --server http://localhost:21025 --email me@example.com
        """,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Configuration file (default: ./multimeter.yaml)",
    )
    parser.add_argument("--email", "-e", type=str, help="Account email")
    parser.add_argument("--password", "-p", type=str, help="Account password")
    parser.add_argument("--token", "-t", type=str, help="Auth token (skips email/password sign-in)")
    parser.add_argument(
        "--server",
        "-s",
        type=str,
        help="Server as host, host:port or a full http(s) URL",
    )
    parser.add_argument("--shard", type=str, help="Shard for console commands")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    parser.add_argument(
        "--log-file",
        "-l",
        type=Path,
        help="Write log records to this file (default: no logging)",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Write a minimal configuration file and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_server_override(server: ServerConfig, value: str) -> None:
    """Point ``server`` at ``value`` (``host``, ``host:port`` or an http(s) URL)."""
    if "://" not in value:
        value = ("https://" if server.secure else "http://") + value
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ConfigurationError(f"Invalid server: {value}", config_field="server")
    try:
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid server port: {value}", config_field="server") from e
    server.host = parts.hostname
    server.secure = parts.scheme == "https"
    server.port = port


def apply_cli_overrides(config: MultimeterConfig, args: argparse.Namespace) -> None:
    """Let command-line flags win over the file and the environment."""
    if args.server:
        apply_server_override(config.server, args.server)
    if args.shard:
        config.server.shard = args.shard
    if args.email:
        config.credentials.email = args.email
    if args.password:
        config.credentials.password = args.password
    if args.token:
        config.credentials.token = args.token


def prompt_for_credentials(credentials: Credentials) -> Credentials:
    """Ask for whatever is missing before the TUI takes over the terminal."""
    if credentials.is_complete():
        return credentials
    if not credentials.email:
        credentials.email = Prompt.ask("Screeps email", console=console)
    if not credentials.password:
        credentials.password = Prompt.ask("Password", password=True, console=console)
    if not credentials.is_complete():
        raise ConfigurationError(
            "Email and password (or a token) are required", config_field="credentials"
        )
    return credentials


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    manager = ConfigManager(config_path=args.config)

    if args.init:
        try:
            path = manager.write_minimal_config()
        except ConfigurationError as e:
            console.print(format_error(e, verbose=args.verbose), style="red", markup=False)
            return 1
        console.print(f"Wrote {path}", style="green", markup=False)
        return 0

    try:
        config = manager.load_config()
        apply_cli_overrides(config, args)
        config.validate()
        setup_logging(verbose=args.verbose, log_file=args.log_file)
        credentials = prompt_for_credentials(config.credentials)
    except MultimeterError as e:
        console.print(format_error(e, verbose=args.verbose), style="red", markup=False)
        return 1
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Cancelled.[/yellow]")
        return 1

    from .ui import run_textual_tui

    logger.info(f"Connecting to {config.server.base_url} (shard {config.server.shard})")
    run_textual_tui(config, credentials)
    return 0


if __name__ == "__main__":
    sys.exit(main())
