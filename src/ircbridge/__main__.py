"""CLI entrypoint. Loads config, builds every IRC server and checks its templates."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from loguru import logger

from ircbridge import __version__
from ircbridge.config import Config, cfg, load_config_with_env
from ircbridge.core.errors import BridgeConfigurationError
from ircbridge.server import IrcServer, build_servers, find_server_for_alias, find_server_for_user_id


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru.
    Level: verbose=True or LOG_LEVEL=DEBUG enables DEBUG; otherwise INFO."""
    level = "INFO"
    if verbose:
        level = "DEBUG"
    else:
        env_level = (os.environ.get("LOG_LEVEL") or "").upper()
        if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = env_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"),
    )


def reload_config(config_path: Path) -> Config:
    """Load config from path and update global cfg."""
    data = load_config_with_env(config_path)
    cfg.reload(data)
    return cfg


def _report_user_id(servers: list[IrcServer], user_id: str) -> None:
    server = find_server_for_user_id(servers, user_id)
    if server is None:
        logger.info("{} is not claimed by any IRC server", user_id)
        return
    logger.info("{} -> {} nick {}", user_id, server.domain, server.get_nick_from_user_id(user_id))


def _report_alias(servers: list[IrcServer], alias: str) -> None:
    server = find_server_for_alias(servers, alias)
    if server is None:
        logger.info("{} is not claimed by any IRC server", alias)
        return
    logger.info("{} -> {} channel {}", alias, server.domain, server.get_channel_from_alias(alias))


def main(argv: list[str] | None = None) -> int:
    """Main entrypoint. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="IRC bridge identity and membership policy checker")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--user-id",
        action="append",
        default=[],
        help="Matrix user ID to resolve against the configured servers (repeatable)",
    )
    parser.add_argument(
        "--alias",
        action="append",
        default=[],
        help="Matrix room alias to resolve against the configured servers (repeatable)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.config.exists():
        logger.error("Config file not found: {}", args.config)
        return 1

    try:
        config = reload_config(args.config)
        servers = build_servers(config)
    except BridgeConfigurationError as exc:
        logger.error("Invalid config ({}): {}", exc.code, exc)
        return 1
    logger.info("Config loaded from {}", args.config)

    for server in servers:
        logger.info("{} users: {}", server.domain, server.get_user_regex())
        logger.info("{} aliases: {}", server.domain, server.get_alias_regex())
    for user_id in args.user_id:
        _report_user_id(servers, user_id)
    for alias in args.alias:
        _report_alias(servers, alias)
    return 0


if __name__ == "__main__":
    sys.exit(main())
