"""Configuration: YAML + env overlay, merged over per-network defaults."""

from ircbridge.config.loader import (
    DEFAULT_SERVER_CONFIG,
    _deep_update,
    load_config,
    load_config_with_env,
    merge_servers,
    with_server_defaults,
)
from ircbridge.config.schema import Config, cfg, is_valid_group_id

__all__ = [
    "DEFAULT_SERVER_CONFIG",
    "Config",
    "_deep_update",
    "cfg",
    "is_valid_group_id",
    "load_config",
    "load_config_with_env",
    "merge_servers",
    "with_server_defaults",
]
