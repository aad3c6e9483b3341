"""Config loading and per-network defaults."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

# Per-network defaults; each entry of ircService.servers is merged over these.
DEFAULT_SERVER_CONFIG: dict[str, Any] = {
    "sendConnectionMessages": True,
    "quitDebounce": {
        "enabled": False,
        "quitsPerSecond": 5,
        "delayMinMs": 3600000,
        "delayMaxMs": 7200000,
    },
    "botConfig": {
        "nick": "appservicebot",
        "joinChannelsIfNoUsers": True,
        "enabled": True,
    },
    "privateMessages": {
        "enabled": True,
        "exclude": [],
        "federate": True,
    },
    "dynamicChannels": {
        "enabled": False,
        "published": True,
        "createAlias": True,
        "joinRule": "public",
        "federate": True,
        "aliasTemplate": "#irc_$SERVER_$CHANNEL",
        "whitelist": [],
        "exclude": [],
    },
    "mappings": {},
    "matrixClients": {
        "userTemplate": "@$SERVER_$NICK",
        "displayName": "$NICK (IRC)",
        "joinAttempts": -1,
    },
    "ircClients": {
        "nickTemplate": "M-$DISPLAY",
        "maxClients": 30,
        "idleTimeout": 172800,
        "reconnectIntervalMs": 5000,
        "concurrentReconnectLimit": 50,
        "allowNickChanges": False,
        "ipv6": {"only": False},
        "lineLimit": 3,
    },
    "membershipLists": {
        "enabled": False,
        "floodDelayMs": 10000,
        "global": {
            "ircToMatrix": {"initial": False, "incremental": False},
            "matrixToIrc": {"initial": False, "incremental": False},
        },
        "channels": [],
        "rooms": [],
    },
}


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Lists are replaced, not extended."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def with_server_defaults(server: dict[str, Any]) -> dict[str, Any]:
    """Merge one network's config over a fresh copy of DEFAULT_SERVER_CONFIG."""
    return _deep_update(copy.deepcopy(DEFAULT_SERVER_CONFIG), server)


def merge_servers(raw: Any) -> dict[str, dict[str, Any]]:
    """Apply network defaults to every entry of an ``ircService.servers`` mapping.

    Entries that are not mappings are logged and dropped; a non-mapping
    ``raw`` yields no servers.
    """
    if not isinstance(raw, dict):
        return {}
    merged: dict[str, dict[str, Any]] = {}
    for domain, server in raw.items():
        if not isinstance(server, dict):
            logger.warning("Skipping server {}: config is not a mapping", domain)
            continue
        merged[str(domain)] = with_server_defaults(server)
    return merged


def load_config(path: str | Path) -> dict[str, Any]:
    """Read the bridge YAML file with SafeLoader; missing or non-mapping files give {}."""
    path = Path(path)
    if not path.exists():
        logger.warning("Config file not found: {}", path)
        return {}
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            logger.error("Failed to parse config {}: {}", path, exc)
            raise
    if not isinstance(data, dict):
        logger.warning("Config file {} has invalid structure (expected dict)", path)
        return {}
    return data


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load .env into the process environment, then the YAML file."""
    from dotenv import load_dotenv

    load_dotenv()
    return load_config(path)
