"""Config schema and accessor."""

from __future__ import annotations

import os
from typing import Any

from loguru import logger

from ircbridge.config.loader import merge_servers
from ircbridge.core.constants import GROUP_ID_RE
from ircbridge.core.errors import BridgeConfigurationError

# Env keys that override config (loaded once per reload)
_ENV_OVERRIDE_KEYS = ("IRCBRIDGE_HOMESERVER_DOMAIN",)

_REQUIRED_TEMPLATES = (
    ("matrixClients", "userTemplate"),
    ("matrixClients", "displayName"),
    ("ircClients", "nickTemplate"),
    ("dynamicChannels", "aliasTemplate"),
)


def _load_env_overrides() -> dict[str, str]:
    """Load env overrides once per reload."""
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


def is_valid_group_id(group_id: object) -> bool:
    """True if ``group_id`` is a string of the form ``+localpart:domain``."""
    if not isinstance(group_id, str):
        return False
    return GROUP_ID_RE.fullmatch(group_id) is not None


class Config:
    """Config accessor with attribute-style access for nested keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data."""
        self._data = data or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug("Config reloaded: {} servers", len(self.servers))

    def _validate(self) -> None:
        """Validate config structure; raise BridgeConfigurationError on failure."""
        if not self.homeserver_domain:
            raise BridgeConfigurationError(
                "homeserver.domain is required",
                code="missing_homeserver_domain",
            )
        servers = self.get("ircService.servers")
        if servers is not None and not isinstance(servers, dict):
            raise BridgeConfigurationError(
                "ircService.servers must be a mapping of domain to server config",
                code="invalid_servers",
                details={"type": type(servers).__name__},
            )
        for domain, server in self.servers.items():
            for section, key in _REQUIRED_TEMPLATES:
                template = server.get(section, {}).get(key)
                if not isinstance(template, str) or not template:
                    raise BridgeConfigurationError(
                        f"ircService.servers.{domain}.{section}.{key} must be a non-empty string",
                        code="invalid_template",
                        details={"server": domain, "key": f"{section}.{key}"},
                    )

    @property
    def raw(self) -> dict[str, Any]:
        """Raw config dict."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by dot-separated path."""
        parts = key.split(".")
        obj: Any = self._data
        for part in parts:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def homeserver_domain(self) -> str:
        env_val = self._env.get("IRCBRIDGE_HOMESERVER_DOMAIN", "")
        if env_val.strip():
            return env_val.strip()
        return str(self.get("homeserver.domain", "") or "")

    @property
    def servers(self) -> dict[str, dict[str, Any]]:
        """Server configs keyed by IRC domain, each merged over DEFAULT_SERVER_CONFIG."""
        return merge_servers(self.get("ircService.servers"))


cfg: Config = Config({})
